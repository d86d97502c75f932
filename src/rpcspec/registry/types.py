from __future__ import annotations

import re
from typing import Optional

from rpcspec.domain.models import TypeTag


_GENERIC_ARGS = re.compile(r"<.*>$")

# exact spellings (Dart, Python and the tag values themselves)
_EXACT: dict[str, TypeTag] = {
    "int": TypeTag.INTEGER,
    "integer": TypeTag.INTEGER,
    "bigint": TypeTag.INTEGER,
    "double": TypeTag.FLOAT,
    "float": TypeTag.FLOAT,
    "num": TypeTag.FLOAT,
    "number": TypeTag.FLOAT,
    "string": TypeTag.TEXT,
    "str": TypeTag.TEXT,
    "text": TypeTag.TEXT,
    "bool": TypeTag.BOOLEAN,
    "boolean": TypeTag.BOOLEAN,
    "datetime": TypeTag.TIMESTAMP,
    "timestamp": TypeTag.TIMESTAMP,
    "uuid": TypeTag.UUID,
    "uuidvalue": TypeTag.UUID,
    "map": TypeTag.MAPPING,
    "dict": TypeTag.MAPPING,
    "mapping": TypeTag.MAPPING,
    "list": TypeTag.SEQUENCE,
    "set": TypeTag.SEQUENCE,
    "tuple": TypeTag.SEQUENCE,
    "sequence": TypeTag.SEQUENCE,
    "object": TypeTag.OBJECT,
}


def split_nullable(type_name: str) -> tuple[str, bool]:
    """`String?` -> ("String", True); `Optional[int]` -> ("int", True)."""
    name = (type_name or "").strip()
    if name.endswith("?"):
        return name[:-1].strip(), True
    if name.startswith("Optional[") and name.endswith("]"):
        return name[len("Optional["):-1].strip(), True
    return name, False


def tag_for_type_name(type_name: str) -> Optional[TypeTag]:
    """
    Resolve a source-language type spelling to a TypeTag.

    Generic arguments are ignored (`List<User>` -> sequence). Returns None
    for names with no known mapping; callers treat those as opaque objects.
    """
    base = _GENERIC_ARGS.sub("", type_name.strip())
    base = base.split("[", 1)[0].strip().lower()  # list[int] -> list
    return _EXACT.get(base)


def parse_type(type_name: str) -> tuple[TypeTag, bool, str]:
    """Return (tag, nullable, original name without the nullable marker)."""
    name, nullable = split_nullable(type_name)
    tag = tag_for_type_name(name)
    if tag is None:
        return TypeTag.OBJECT, nullable, name
    return tag, nullable, name
