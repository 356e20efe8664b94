"""
CSV Row Parser

Turns the raw export text into ordered raw rows keyed by the header text as
it appeared in the sheet. Never raises on malformed rows: short rows are
padded with empty strings and surplus fields are dropped.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

_BOM = "\ufeff"


def _is_blank(fields: List[str]) -> bool:
    return all(not (value or "").strip() for value in fields)


def _iter_fields(text: str, delimiter: str) -> Iterator[List[str]]:
    # No cell can outgrow the payload; the csv module default is 128 KiB.
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    while True:
        try:
            yield next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            logger.warning("Skipping unreadable line %d: %s", reader.line_num, exc)


def parse_rows(text: str, *, delimiter: str = ",") -> List[RawRow]:
    """Parse delimited text with a header row into a list of raw rows."""
    if not text:
        return []
    if text.startswith(_BOM):
        text = text[len(_BOM):]

    headers: List[str] | None = None
    rows: List[RawRow] = []
    for fields in _iter_fields(text, delimiter):
        if _is_blank(fields):
            continue
        if headers is None:
            headers = [(name or "").strip() for name in fields]
            continue

        row: RawRow = {}
        for idx, header in enumerate(headers):
            if header in row:
                logger.debug("Duplicate header %r ignored at column %d", header, idx + 1)
                continue
            row[header] = fields[idx].strip() if idx < len(fields) else ""
        rows.append(row)

    logger.debug("Parsed %d raw rows", len(rows))
    return rows


__all__ = ["RawRow", "parse_rows"]
