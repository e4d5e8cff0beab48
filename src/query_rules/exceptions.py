"""
Errors raised by the query-rules convenience layers.

Loading, saving and compiling rules never raise: they report failure through
a ``bool`` or degrade the compiled clause.  The builder, the JSON factory,
``to_dict``/``from_dict`` and strict operator lookup raise the errors below
instead.  Each one serializes itself with ``to_dict()`` so it can be returned
from an API as-is.
"""

from __future__ import annotations

from collections.abc import Sequence
from difflib import get_close_matches
from typing import Any

_PREVIEW_LIMIT = 15


def _closest(
    word: str, candidates: Sequence[str], limit: int, cutoff: float
) -> list[str]:
    return get_close_matches(word, list(candidates), n=limit, cutoff=cutoff)


def _preview(names: Sequence[str]) -> str:
    ordered = sorted(names)
    shown = ", ".join(ordered[:_PREVIEW_LIMIT])
    return shown + ", ..." if len(ordered) > _PREVIEW_LIMIT else shown


class QueryRulesError(Exception):
    """Root of the query-rules error tree."""

    code = "QUERY_RULES_ERROR"

    def details(self) -> dict[str, Any]:
        """Extra members merged into :meth:`to_dict`."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": str(self), **self.details()}


class FilterValidationError(QueryRulesError):
    """
    A serialized filter or a field catalog configuration is malformed.

    *path* names the offending member (``"fields.0.type"``) or ``"<root>"``.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def details(self) -> dict[str, Any]:
        return {"path": self.path}


class OperatorNotFoundError(QueryRulesError):
    """An operator token is not in the rule operator table."""

    code = "OPERATOR_NOT_FOUND"

    def __init__(self, operator: str, valid_operators: Sequence[str]) -> None:
        self.operator = operator
        self.valid_operators = list(valid_operators)
        self.suggestions = _closest(operator, self.valid_operators, 3, 0.6)

        message = f"'{operator}' is not a rule operator"
        if self.suggestions:
            message += f" (closest: {', '.join(self.suggestions)})"
        message += f"; expected one of: {', '.join(self.valid_operators)}"
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": self.valid_operators,
        }


class FieldNotFoundError(QueryRulesError):
    """
    A field token is unknown to the field catalog.

    The message lists near matches first, then a preview of the catalog::

        'gnre' is not a known field
          closest: genre
          known fields: album, artist, genre, ...
    """

    code = "FIELD_NOT_FOUND"

    def __init__(
        self,
        invalid_field: str,
        available_fields: Sequence[str],
        cutoff: float = 0.6,
    ) -> None:
        self.invalid_field = invalid_field
        self.available_fields = list(available_fields)
        self.suggestions = _closest(invalid_field, self.available_fields, 5, cutoff)

        lines = [f"'{invalid_field}' is not a known field"]
        if self.suggestions:
            lines.append(f"  closest: {', '.join(self.suggestions)}")
        lines.append(f"  known fields: {_preview(self.available_fields)}")
        super().__init__("\n".join(lines))

    def details(self) -> dict[str, Any]:
        return {
            "field": self.invalid_field,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }
