"""Error types that cross module boundaries."""

from __future__ import annotations

from typing import List, Optional, Sequence


class FetchError(RuntimeError):
    """Raised when the primary endpoint and every proxy rewrite have failed.

    Only the most recent failure is reported in the message; the URLs that
    were tried are kept on ``attempts``.
    """

    def __init__(
        self,
        message: str,
        *,
        attempts: Sequence[str] = (),
        last_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.attempts: List[str] = list(attempts)
        self.last_error = last_error


class AliasCollisionError(ValueError):
    """Raised when an alias table would let one header shadow another."""


__all__ = ["AliasCollisionError", "FetchError"]
