"""
Column types for JSON-encoded sub-fields
"""

import json
import logging
from typing import Any, Callable, Optional, Type

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


def decode_json(raw: Any, default_factory: Callable[[], Any], expected: Optional[Type] = None) -> Any:
    """
    Decode stored JSON text, degrading to ``default_factory()`` when the
    value is empty, malformed or not of the expected shape.
    """
    if raw is None:
        return default_factory()
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        if not raw.strip():
            return default_factory()
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Malformed JSON in stored column, using default", extra={"raw": raw[:100]})
            return default_factory()
    else:
        value = raw

    if value is None:
        return default_factory()
    if expected is not None and not isinstance(value, expected):
        logger.warning(
            "Stored JSON has unexpected shape, using default",
            extra={"expected": expected.__name__, "actual": type(value).__name__},
        )
        return default_factory()
    return value


class SafeJSON(TypeDecorator):
    """
    JSON stored as text. Reads never raise: corrupt values come back as the
    column's default (empty list, empty mapping or None).
    """

    impl = Text
    cache_ok = True

    def __init__(self, default_factory: Callable[[], Any] = lambda: None, expected: Optional[Type] = None, **kwargs):
        super().__init__(**kwargs)
        self.default_factory = default_factory
        self.expected = expected

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        return decode_json(value, self.default_factory, self.expected)
