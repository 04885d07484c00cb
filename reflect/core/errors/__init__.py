"""
Error code system.

ReflectError is the base exception for all structured errors.
Raise it with an error code from the registry, and the error handlers
will produce a structured JSON response with the registry's HTTP status.

Usage:
    from reflect.core.errors import ReflectError
    raise ReflectError("REF-FB-001", detail=f"feedback {feedback.id}")
"""

from __future__ import annotations

import re

CODE_PATTERN = re.compile(r"^REF-[A-Z]{2,6}-\d{3}$")


class ReflectError(Exception):
    """Structured application error tied to the error registry.

    Args:
        code: Registry error code, e.g. "REF-DB-001".
        detail: Internal-only detail message (logged, never returned).
        context: Arbitrary key-value context for structured logging.
    """

    def __init__(
        self,
        code: str,
        detail: str | None = None,
        context: dict | None = None,
    ) -> None:
        if not CODE_PATTERN.match(code):
            raise ValueError(f"Invalid error code format: {code!r}")
        self.code = code
        self.detail = detail
        self.context = context or {}
        super().__init__(f"{code}: {detail}" if detail else code)

    @property
    def message(self) -> str:
        """User-facing message from the registry, falling back to the code."""
        from reflect.core.errors.registry import error_registry

        entry = error_registry.get(self.code)
        return entry.safe_message if entry else self.code
