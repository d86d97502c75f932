from __future__ import annotations

import logging
from contextlib import contextmanager
from time import monotonic
from typing import Dict, Iterator, Optional


def configure_root(level: int | str = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


@contextmanager
def scoped_timer(
    logger: logging.Logger, message: str, *, extra: Optional[Dict[str, object]] = None
) -> Iterator[Dict[str, object]]:
    """Log `message` at DEBUG with the elapsed time once the block exits.

    The yielded dict is merged into the record's extras, so callers can attach
    results computed inside the block.
    """
    start = monotonic()
    fields: Dict[str, object] = dict(extra or {})
    try:
        yield fields
    finally:
        fields["duration_s"] = monotonic() - start
        logger.debug("%s", message, extra=fields)
