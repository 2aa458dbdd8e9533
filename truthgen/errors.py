"""
Truthgen Errors

Configuration errors ("fix your schema") are kept apart from internal
failures so batch callers can tell them apart.
"""

from __future__ import annotations


class TruthgenError(Exception):
    """Base class for all truthgen errors."""


class SchemaError(TruthgenError):
    """The schema or project config file could not be loaded or validated."""


class UnknownViewError(TruthgenError, KeyError):
    """A view name was requested that the schema does not declare."""

    def __init__(self, view_name: str):
        self.view_name = view_name
        super().__init__(f"View '{view_name}' not found in schema")

    def __str__(self) -> str:
        return self.args[0]


class ViewConfigError(TruthgenError, ValueError):
    """
    A view's configuration is structurally invalid for its kind.

    Raised while resolving a view, before any text is generated.
    """

    def __init__(
        self,
        message: str,
        *,
        view_name: str | None = None,
        field: str | None = None,
        expected: str | None = None,
    ):
        self.view_name = view_name
        self.field = field
        self.expected = expected
        super().__init__(message)

    def __str__(self) -> str:
        message = self.args[0]
        if self.view_name:
            return f"{self.view_name}: {message}"
        return message
