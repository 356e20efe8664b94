"""
Cell Value Sanitizer

Maps spreadsheet error markers and explicit null tokens to the empty string
so nothing downstream ever renders ``#N/A`` as if it were data.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

# Spreadsheet formula errors and explicit null markers.
DEFAULT_SENTINELS: Tuple[str, ...] = (
    "#ERROR!",
    "#N/A",
    "N/A",
    "NULL",
    "UNDEFINED",
    "#REF!",
    "#VALUE!",
    "#DIV/0!",
    "#NAME?",
    "#NUM!",
    "#NULL!",
)


class RecordSanitizer:
    """Trim cell values and blank out blacklisted sentinel tokens."""

    def __init__(self, sentinels: Iterable[str] = DEFAULT_SENTINELS) -> None:
        self._sentinels = frozenset(token.strip().upper() for token in sentinels)

    @property
    def sentinels(self) -> frozenset:
        return self._sentinels

    def sanitize(self, raw_value: Optional[object]) -> str:
        if raw_value is None:
            return ""
        value = str(raw_value).strip()
        if not value:
            return ""
        return "" if value.upper() in self._sentinels else value


_default_sanitizer = RecordSanitizer()


def sanitize(raw_value: Optional[object], sentinels: Optional[Iterable[str]] = None) -> str:
    """Sanitize one cell against ``sentinels`` (the default blacklist when omitted)."""
    if sentinels is None:
        return _default_sanitizer.sanitize(raw_value)
    return RecordSanitizer(sentinels).sanitize(raw_value)


__all__ = ["DEFAULT_SENTINELS", "RecordSanitizer", "sanitize"]
