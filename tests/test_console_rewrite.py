import base64
import json
import re

import pytest

from rpcspec.render.console import (
    REQUEST_INTERCEPTOR_JS,
    _NUMERIC,
    _TRAILING_PAIR,
    OutgoingCall,
    coerce_query_value,
    encode_spec,
    render_console_html,
    rewrite_call,
)


def test_get_with_query_moves_params_into_body():
    call = OutgoingCall(url="http://localhost:8080/user/listUsers?active=true&limit=5", method="GET")
    out = rewrite_call(call)

    assert out.url == "http://localhost:8080/user"
    assert out.method == "POST"
    assert json.loads(out.body) == {"method": "listUsers", "active": True, "limit": 5}
    assert out.headers["Content-Type"] == "application/json"


def test_post_body_is_kept_and_method_overwritten():
    call = OutgoingCall(
        url="http://h:8080/user/createUser",
        method="POST",
        body=json.dumps({"name": "Ann", "method": "somethingElse"}),
        headers={"content-type": "text/plain", "Authorization": "Bearer abc"},
    )
    out = rewrite_call(call)

    assert out.url == "http://h:8080/user"
    assert json.loads(out.body) == {"name": "Ann", "method": "createUser"}
    assert out.headers == {"Authorization": "Bearer abc", "Content-Type": "application/json"}


def test_dict_body_is_accepted():
    out = rewrite_call(OutgoingCall(url="http://h/user/updateProfile", method="PATCH", body={"id": 1}))
    assert json.loads(out.body) == {"id": 1, "method": "updateProfile"}
    assert out.method == "POST"


def test_malformed_body_is_replaced():
    for body in ("{not json", "[1, 2]", "42"):
        out = rewrite_call(OutgoingCall(url="http://h/user/deleteUser", method="DELETE", body=body))
        assert json.loads(out.body) == {"method": "deleteUser"}


def test_query_kept_for_non_get_calls():
    out = rewrite_call(OutgoingCall(url="http://h/user/createUser?trace=1", method="POST"))
    assert out.url == "http://h/user?trace=1"
    assert json.loads(out.body) == {"method": "createUser"}


def test_head_moves_query_like_get():
    out = rewrite_call(OutgoingCall(url="http://h/user/getUser?id=7", method="HEAD"))
    assert out.url == "http://h/user"
    assert json.loads(out.body) == {"id": 7, "method": "getUser"}


def test_url_without_two_trailing_segments_passes_through():
    call = OutgoingCall(url="http://h/", method="GET", body="raw")
    assert rewrite_call(call) is call


def test_only_last_segment_is_stripped():
    # the method name also appears earlier in the URL
    out = rewrite_call(OutgoingCall(url="http://h/login/api/login", method="POST"))
    assert out.url == "http://h/login/api"
    assert json.loads(out.body)["method"] == "login"


def test_input_call_not_mutated():
    headers = {"X-Trace": "1"}
    call = OutgoingCall(url="http://h/user/getUser?id=1", method="GET", headers=headers)
    rewrite_call(call)
    assert call.url == "http://h/user/getUser?id=1"
    assert headers == {"X-Trace": "1"}


def test_coerce_query_value():
    assert coerce_query_value("true") is True
    assert coerce_query_value("false") is False
    assert coerce_query_value("5") == 5
    assert coerce_query_value("-2") == -2
    assert coerce_query_value("1.5") == 1.5
    assert coerce_query_value("1e3") == 1000.0
    assert coerce_query_value("") == ""
    assert coerce_query_value("abc") == "abc"
    assert coerce_query_value("True") == "True"


def test_encode_spec_round_trip():
    doc = {"openapi": "3.0.3", "info": {"title": "Café </script>"}}
    decoded = base64.b64decode(encode_spec(doc)).decode("utf-8")
    assert json.loads(decoded) == doc


def test_console_html_embeds_spec_and_interceptor():
    doc = {"openapi": "3.0.3", "info": {"title": "T", "version": "1"}, "paths": {}}
    html = render_console_html(doc)

    assert "<!DOCTYPE html>" in html
    assert "swagger-ui-dist@5.9.0" in html
    assert "requestInterceptor: rpcRequestInterceptor" in html
    assert "function rpcRequestInterceptor" in html

    m = re.search(r"atob\('([A-Za-z0-9+/=]+)'\)", html)
    assert m is not None
    assert json.loads(base64.b64decode(m.group(1)).decode("utf-8")) == doc


def test_console_html_renders_error_when_spec_cannot_be_encoded():
    html = render_console_html({"bad": {1, 2}})
    assert "Error loading API specification" in html
    assert "SwaggerUIBundle" not in html


def _strict_loads(text: str):
    def reject(token):
        raise ValueError(token)

    return json.loads(text, parse_constant=reject)


@pytest.mark.parametrize("value", ["1e400", "-1e400", "1.5e999"])
def test_overflowing_numbers_stay_strings(value):
    assert coerce_query_value(value) == value

    out = rewrite_call(OutgoingCall(url=f"http://h/user/getUser?n={value}", method="GET"))
    assert _strict_loads(out.body) == {"n": value, "method": "getUser"}


def test_non_json_constants_in_body_are_dropped():
    for body in ('{"a": Infinity}', '{"a": NaN}', '{"a": -Infinity}'):
        out = rewrite_call(OutgoingCall(url="http://h/user/createUser", method="POST", body=body))
        assert _strict_loads(out.body) == {"method": "createUser"}


def test_interceptor_follows_the_python_rule():
    js = REQUEST_INTERCEPTOR_JS
    assert "/" + _NUMERIC.pattern + "/" in js
    assert "base.match(/" + _TRAILING_PAIR.pattern.replace("/", "\\/") + "/)" in js
    assert "originalMethod === 'GET' || originalMethod === 'HEAD'" in js
    assert "request.method = 'POST'" in js
    assert "body.method = methodName" in js
    assert "headers['Content-Type'] = 'application/json'" in js
    assert "isFinite(number) ? number : value" in js


def test_interceptor_decodes_method_name_leniently():
    js = REQUEST_INTERCEPTOR_JS
    start = js.index("decodeURIComponent(match[2])")
    assert js.rindex("try {", 0, start) > js.index("var methodName")
    assert "methodName = match[2];" in js[start:]
