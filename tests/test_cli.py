import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from rpcspec.cli import app


runner = CliRunner()


def write_manifest(p: Path, data: dict) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


MANIFEST = {
    "endpoints": [
        {
            "name": "user",
            "requiresAuthentication": True,
            "methods": [
                {"name": "listUsers"},
                {"name": "createUser", "parameters": {"name": "String", "email": "String"}},
            ],
        },
        {
            "name": "emailIdp",
            "methods": [{"name": "login", "parameters": {"email": "String", "password": "String"}}],
        },
    ]
}


def test_ping():
    result = runner.invoke(app, ["ping"])
    assert result.exit_code == 0
    assert "pong" in result.output


def test_generate_json_to_stdout(tmp_path: Path):
    manifest = write_manifest(tmp_path / "m.json", MANIFEST)
    result = runner.invoke(app, ["generate", str(manifest), "--title", "CLI API"])

    assert result.exit_code == 0, result.output
    doc = json.loads(result.stdout)
    assert doc["info"]["title"] == "CLI API"
    assert set(doc["paths"]) == {"/user/listUsers", "/user/createUser", "/emailIdp/login"}


def test_generate_yaml_to_file(tmp_path: Path):
    manifest = write_manifest(tmp_path / "m.json", MANIFEST)
    out = tmp_path / "out" / "openapi.yaml"
    result = runner.invoke(app, ["generate", str(manifest), "--format", "yaml", "--out", str(out)])

    assert result.exit_code == 0, result.output
    doc = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert doc["paths"]["/emailIdp/login"]["post"]["operationId"] == "emailIdp_login"


def test_generate_rejects_unknown_format(tmp_path: Path):
    manifest = write_manifest(tmp_path / "m.json", MANIFEST)
    result = runner.invoke(app, ["generate", str(manifest), "--format", "xml"])
    assert result.exit_code != 0


def test_generate_rejects_missing_manifest(tmp_path: Path):
    result = runner.invoke(app, ["generate", str(tmp_path / "nope.json")])
    assert result.exit_code != 0


def test_generate_rejects_duplicate_methods(tmp_path: Path):
    manifest = write_manifest(
        tmp_path / "m.json",
        {"endpoints": [{"name": "user", "methods": [{"name": "getUser"}, {"name": "getuser"}]}]},
    )
    result = runner.invoke(app, ["generate", str(manifest)])
    assert result.exit_code != 0


def test_routes_lists_operations(tmp_path: Path):
    manifest = write_manifest(tmp_path / "m.json", MANIFEST)
    result = runner.invoke(app, ["routes", str(manifest)])

    assert result.exit_code == 0, result.output
    assert "Endpoints: 2" in result.output
    assert "Operations: 3" in result.output
