from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from rpcspec.domain.models import DocumentMeta


def _parse_int(value: str | None, *, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_str(value: str | None, *, default: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(frozen=True)
class Settings:
    title: str = "API Documentation"
    version: str = "1.0.0"
    description: Optional[str] = None
    # port of the RPC transport the console sends calls to
    api_port: int = 8080
    docs_host: str = "127.0.0.1"
    docs_port: int = 8082
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            title=_parse_str(env.get("RPCSPEC_TITLE"), default=defaults.title),
            version=_parse_str(env.get("RPCSPEC_VERSION"), default=defaults.version),
            description=_parse_str(env.get("RPCSPEC_DESCRIPTION"), default=None),
            api_port=_parse_int(env.get("RPCSPEC_API_PORT"), default=defaults.api_port),
            docs_host=_parse_str(env.get("RPCSPEC_DOCS_HOST"), default=defaults.docs_host),
            docs_port=_parse_int(env.get("RPCSPEC_DOCS_PORT"), default=defaults.docs_port),
            log_level=_parse_str(env.get("RPCSPEC_LOG_LEVEL"), default=defaults.log_level).upper(),
        )

    def meta(self, server_url: Optional[str] = None) -> DocumentMeta:
        return DocumentMeta(
            title=self.title,
            version=self.version,
            description=self.description,
            server_url=server_url,
        )
