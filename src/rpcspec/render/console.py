from __future__ import annotations

import base64
import html
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from urllib.parse import parse_qsl, unquote

from rpcspec.render.text import to_json

logger = logging.getLogger(__name__)

SWAGGER_UI_VERSION = "5.9.0"
SWAGGER_UI_CDN = f"https://unpkg.com/swagger-ui-dist@{SWAGGER_UI_VERSION}"

RPC_HTTP_METHOD = "POST"
JSON_CONTENT_TYPE = "application/json"

_TRAILING_PAIR = re.compile(r"/([^/?#]+)/([^/?#]+)$")
_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class OutgoingCall:
    """A request as the console is about to send it."""

    url: str
    method: str = "GET"
    body: Union[str, dict[str, Any], None] = None
    headers: dict[str, str] = field(default_factory=dict)


def coerce_query_value(value: str) -> Union[str, bool, int, float]:
    if value in ("true", "false"):
        return value == "true"
    stripped = value.strip()
    if _NUMERIC.match(stripped):
        if _INTEGER.match(stripped):
            return int(stripped)
        number = float(stripped)
        # 1e400 overflows; JSON has no token for it
        if math.isfinite(number):
            return number
    return value


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-JSON constant {token}")


def _body_object(body: Union[str, dict[str, Any], None]) -> dict[str, Any]:
    if not body:
        return {}
    if isinstance(body, dict):
        return dict(body)
    try:
        parsed = json.loads(body, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def rewrite_call(call: OutgoingCall) -> OutgoingCall:
    """
    Turn a REST-shaped console call into the RPC transport's shape.

    `VERB .../{endpoint}/{method}?q=1` becomes `POST .../{endpoint}` with
    `{"method": "{method}", ...}` as JSON body. Query parameters move into
    the body for GET/HEAD calls. URLs without a trailing `/{a}/{b}` pass
    through unchanged. The input call is never mutated.
    """
    base, sep, query = call.url.partition("?")
    match = _TRAILING_PAIR.search(base)
    if match is None:
        return call

    method_name = unquote(match.group(2))
    url = base[: match.start(2) - 1]
    body = _body_object(call.body)

    original = (call.method or "GET").upper()
    if sep:
        if original in ("GET", "HEAD"):
            for key, value in parse_qsl(query, keep_blank_values=True):
                body[key] = coerce_query_value(value)
        else:
            url = f"{url}?{query}"

    body["method"] = method_name

    headers = {k: v for k, v in (call.headers or {}).items() if k.lower() != "content-type"}
    headers["Content-Type"] = JSON_CONTENT_TYPE

    return OutgoingCall(
        url=url,
        method=RPC_HTTP_METHOD,
        body=json.dumps(body),
        headers=headers,
    )


# Same rule as rewrite_call, run by Swagger UI in the browser.
REQUEST_INTERCEPTOR_JS = r"""
function rpcRequestInterceptor(request) {
  if (!request.url) {
    return request;
  }
  var qIndex = request.url.indexOf('?');
  var base = qIndex >= 0 ? request.url.slice(0, qIndex) : request.url;
  var query = qIndex >= 0 ? request.url.slice(qIndex + 1) : null;
  var match = base.match(/\/([^\/?#]+)\/([^\/?#]+)$/);
  if (!match) {
    return request;
  }
  var methodName;
  try {
    methodName = decodeURIComponent(match[2]);
  } catch (e) {
    methodName = match[2];
  }
  var originalMethod = (request.method || 'GET').toUpperCase();
  var url = base.slice(0, base.length - match[2].length - 1);

  var body = {};
  if (request.body) {
    try {
      var parsed = typeof request.body === 'string' ? JSON.parse(request.body) : request.body;
      if (parsed && typeof parsed === 'object' && !Array.isArray(parsed)) {
        body = parsed;
      }
    } catch (e) {
      body = {};
    }
  }

  if (query !== null) {
    if (originalMethod === 'GET' || originalMethod === 'HEAD') {
      var numeric = /^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$/;
      new URLSearchParams(query).forEach(function (value, key) {
        if (value === 'true' || value === 'false') {
          body[key] = value === 'true';
        } else if (numeric.test(value.trim())) {
          var number = Number(value.trim());
          body[key] = isFinite(number) ? number : value;
        } else {
          body[key] = value;
        }
      });
    } else {
      url = url + '?' + query;
    }
  }

  body.method = methodName;
  request.url = url;
  request.method = 'POST';
  request.body = JSON.stringify(body);
  var headers = request.headers || {};
  Object.keys(headers).forEach(function (name) {
    if (name.toLowerCase() === 'content-type') {
      delete headers[name];
    }
  });
  headers['Content-Type'] = 'application/json';
  request.headers = headers;
  return request;
}
"""

_CONSOLE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>__TITLE__</title>
    <link rel="stylesheet" type="text/css" href="__CDN__/swagger-ui.css" />
    <style>
      html { box-sizing: border-box; overflow-y: scroll; }
      *, *:before, *:after { box-sizing: inherit; }
      body { margin: 0; background: #fafafa; }
    </style>
  </head>
  <body>
    <div id="swagger-ui"></div>
    <script src="__CDN__/swagger-ui-bundle.js"></script>
    <script src="__CDN__/swagger-ui-standalone-preset.js"></script>
    <script>
__INTERCEPTOR__
      window.onload = function() {
        var spec;
        try {
          var raw = atob('__SPEC_B64__');
          var bytes = Uint8Array.from(raw, function (c) { return c.charCodeAt(0); });
          spec = JSON.parse(new TextDecoder('utf-8').decode(bytes));
        } catch (e) {
          console.error('Failed to parse OpenAPI spec:', e);
          var target = document.getElementById('swagger-ui');
          target.textContent = 'Error loading API specification: ' + e.message;
          target.style.cssText = 'padding: 20px; color: red;';
          return;
        }
        window.ui = SwaggerUIBundle({
          spec: spec,
          dom_id: '#swagger-ui',
          deepLinking: true,
          presets: [SwaggerUIBundle.presets.apis, SwaggerUIStandalonePreset],
          plugins: [SwaggerUIBundle.plugins.DownloadUrl],
          layout: 'StandaloneLayout',
          tryItOutEnabled: true,
          requestInterceptor: rpcRequestInterceptor
        });
      };
    </script>
  </body>
</html>
"""

_ERROR_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <title>__TITLE__</title>
  </head>
  <body>
    <div id="swagger-ui" style="padding: 20px; color: red;">Error loading API specification: __MESSAGE__</div>
  </body>
</html>
"""


def encode_spec(doc: Any) -> str:
    """Compact JSON, UTF-8, base64: safe to drop into a JS string literal."""
    return base64.b64encode(to_json(doc, pretty=False).encode("utf-8")).decode("ascii")


def render_error_html(message: str, title: str = "API Documentation - Swagger UI") -> str:
    return (
        _ERROR_TEMPLATE.replace("__TITLE__", html.escape(title))
        .replace("__MESSAGE__", html.escape(message))
    )


def render_console_html(doc: Any, title: Optional[str] = None) -> str:
    """
    Swagger UI page with the document embedded and the RPC request
    interceptor installed. If the document cannot be encoded, an inline
    error page is returned instead of raising.
    """
    page_title = title or "API Documentation - Swagger UI"
    try:
        encoded = encode_spec(doc)
    except (TypeError, ValueError) as exc:
        logger.exception("console.embed_failed")
        return render_error_html(str(exc), title=page_title)

    return (
        _CONSOLE_TEMPLATE.replace("__TITLE__", html.escape(page_title))
        .replace("__CDN__", SWAGGER_UI_CDN)
        .replace("__INTERCEPTOR__", REQUEST_INTERCEPTOR_JS)
        .replace("__SPEC_B64__", encoded)
    )
