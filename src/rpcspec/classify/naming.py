from __future__ import annotations

import re
from typing import Literal

Verb = Literal["GET", "POST", "PATCH", "DELETE"]

# Ordered: first matching row wins. "register" is create-like here even
# though it also appears in the auth tables below.
VERB_RULES: tuple[tuple[Verb, tuple[str, ...]], ...] = (
    ("GET", (
        "get", "list", "fetch", "find", "read", "retrieve",
        "query", "search", "show", "view", "load",
    )),
    ("POST", (
        "create", "add", "insert", "save", "register", "new",
        "build", "generate", "submit", "send", "post",
    )),
    ("PATCH", (
        "update", "modify", "patch", "edit", "change",
        "set", "put", "replace", "adjust",
    )),
    ("DELETE", (
        "delete", "remove", "destroy", "drop", "clear", "unlink", "unregister",
    )),
    ("POST", (
        "execute", "run", "perform", "do", "trigger", "invoke", "call",
        "start", "stop", "cancel", "complete", "finish", "verify",
        "validate", "sync", "link", "login", "logout",
    )),
)

# The RPC transport only accepts POST.
DEFAULT_VERB: Verb = "POST"

AUTH_ENDPOINT_MARKERS: tuple[str, ...] = ("auth", "idp", "login", "register")
AUTH_METHOD_NAMES: tuple[str, ...] = ("login", "logout")
AUTH_METHOD_PREFIXES: tuple[str, ...] = (
    "register",
    "startregistration",
    "finishregistration",
    "verifyregistration",
    "startpasswordreset",
    "verifypasswordreset",
    "finishpasswordreset",
)

_UPPER = re.compile(r"(?=[A-Z])")


def classify_verb(method_name: str) -> Verb:
    """Semantic HTTP verb for a method name, inferred from its prefix."""
    lower = method_name.lower()
    for verb, prefixes in VERB_RULES:
        if lower.startswith(prefixes):
            return verb
    return DEFAULT_VERB


def is_auth_exempt(endpoint_name: str, method_name: str) -> bool:
    """True if the method belongs to a login/registration flow."""
    endpoint = endpoint_name.lower()
    if any(marker in endpoint for marker in AUTH_ENDPOINT_MARKERS):
        return True

    method = method_name.lower()
    return method in AUTH_METHOD_NAMES or method.startswith(AUTH_METHOD_PREFIXES)


def to_display_label(method_name: str) -> str:
    # createUser -> Create User
    words = [w for w in _UPPER.split(method_name) if w]
    return " ".join(w[0].upper() + w[1:].lower() for w in words)
