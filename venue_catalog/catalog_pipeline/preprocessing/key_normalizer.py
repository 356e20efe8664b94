"""
Header Key Normalizer

Maps free-form sheet headers onto canonical keys and resolves field lookups
across sheet revisions whose headers were renamed over time.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional

from ...core.errors import AliasCollisionError

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_key(header: Optional[object]) -> str:
    """Lowercase, trim and collapse whitespace runs into a single underscore."""
    if header is None:
        return ""
    return _WHITESPACE_RE.sub("_", str(header).strip().lower())


def build_alias_table(aliases: Mapping[str, str]) -> Dict[str, str]:
    """Normalize an alias table and reject entries that would shadow each other.

    Identity entries (legacy header already normalizing to its target) are
    dropped. Several legacy keys may share a target.
    """
    seen: Dict[str, str] = {}
    table: Dict[str, str] = {}
    for legacy, target in aliases.items():
        key = normalize_key(legacy)
        if not key:
            raise AliasCollisionError(f"Alias {legacy!r} normalizes to an empty key")
        if normalize_key(target) != target or not target:
            raise AliasCollisionError(
                f"Alias target {target!r} for {legacy!r} is not a canonical key "
                f"(expected {normalize_key(target)!r})"
            )
        existing = seen.get(key)
        if existing is not None and existing != target:
            raise AliasCollisionError(
                f"Alias {legacy!r} normalizes to {key!r}, already mapped to {existing!r}; "
                f"cannot also map it to {target!r}"
            )
        seen[key] = target
        if key != target:
            table[key] = target

    chained = sorted(set(table) & set(table.values()))
    if chained:
        raise AliasCollisionError(f"Alias keys are also alias targets: {chained}")
    return table


class AliasResolver:
    """Single lookup path for reading a field out of a normalized record."""

    def __init__(self, aliases: Mapping[str, str]) -> None:
        self._aliases = build_alias_table(aliases)
        self._legacy_by_target: Dict[str, List[str]] = {}
        for legacy, target in self._aliases.items():
            self._legacy_by_target.setdefault(target, []).append(legacy)

    @property
    def aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def canonical(self, key: str) -> str:
        nk = normalize_key(key)
        return self._aliases.get(nk, nk)

    def resolve(self, record: Mapping[str, str], field_name: str) -> str:
        """Return the value for ``field_name`` or ``""``.

        Lookup order: the normalized name itself, then the canonical key it
        is an alias of, then any legacy key that aliases to it (declaration
        order). Empty values fall through to the next step.
        """
        nk = normalize_key(field_name)
        if not nk:
            return ""
        direct = record.get(nk)
        if direct:
            return direct
        target = self._aliases.get(nk)
        if target:
            value = record.get(target)
            if value:
                return value
        for legacy in self._legacy_by_target.get(nk, ()):
            value = record.get(legacy)
            if value:
                return value
        return ""

    def shadowed(self, keys: Iterable[str]) -> Dict[str, List[str]]:
        """Group header keys that would answer for the same canonical key."""
        groups: Dict[str, List[str]] = {}
        for key in keys:
            nk = normalize_key(key)
            if nk:
                groups.setdefault(self._aliases.get(nk, nk), []).append(nk)
        return {target: members for target, members in groups.items() if len(members) > 1}


__all__ = ["AliasResolver", "build_alias_table", "normalize_key"]
