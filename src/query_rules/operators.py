"""
Rule operator vocabulary.

The enum values are the lowercase wire tokens used by both serialization
formats.  Declaration order is public: it is the order operators are listed
in by :func:`list_available_operators`.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from .exceptions import OperatorNotFoundError


class RuleOperator(str, Enum):
    """Supported rule operators, keyed by wire token."""

    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "doesnotcontain"
    EQUALS = "is"
    DOES_NOT_EQUAL = "isnot"
    STARTS_WITH = "startswith"
    ENDS_WITH = "endswith"
    GREATER_THAN = "greaterthan"
    LESS_THAN = "lessthan"
    AFTER = "after"
    BEFORE = "before"
    IN_THE_LAST = "inthelast"
    NOT_IN_THE_LAST = "notinthelast"
    TRUE = "true"
    FALSE = "false"
    BETWEEN = "between"


# Display-string ids, resolved by the host's localized string table.
DISPLAY_IDS: dict[RuleOperator, int] = {
    RuleOperator.CONTAINS: 21400,
    RuleOperator.DOES_NOT_CONTAIN: 21401,
    RuleOperator.EQUALS: 21402,
    RuleOperator.DOES_NOT_EQUAL: 21403,
    RuleOperator.STARTS_WITH: 21404,
    RuleOperator.ENDS_WITH: 21405,
    RuleOperator.GREATER_THAN: 21406,
    RuleOperator.LESS_THAN: 21407,
    RuleOperator.AFTER: 21408,
    RuleOperator.BEFORE: 21409,
    RuleOperator.IN_THE_LAST: 21410,
    RuleOperator.NOT_IN_THE_LAST: 21411,
    RuleOperator.TRUE: 20122,
    RuleOperator.FALSE: 20424,
    RuleOperator.BETWEEN: 21456,
}

FALLBACK_DISPLAY_ID = 16018

# English labels used when the host supplies no string lookup.
DEFAULT_LABELS: dict[int, str] = {
    21400: "contains",
    21401: "does not contain",
    21402: "is",
    21403: "is not",
    21404: "starts with",
    21405: "ends with",
    21406: "greater than",
    21407: "less than",
    21408: "after",
    21409: "before",
    21410: "in the last",
    21411: "not in the last",
    20122: "True",
    20424: "False",
    21456: "between",
    FALLBACK_DISPLAY_ID: "None",
}

BOOLEAN_OPERATORS: frozenset[RuleOperator] = frozenset(
    {RuleOperator.TRUE, RuleOperator.FALSE}
)

_BY_TOKEN: dict[str, RuleOperator] = {op.value: op for op in RuleOperator}


def translate_operator(token: str) -> RuleOperator:
    """Map a wire token to its operator, defaulting to ``CONTAINS``."""
    return _BY_TOKEN.get(token.lower(), RuleOperator.CONTAINS)


def strict_translate_operator(token: RuleOperator | str) -> RuleOperator:
    """
    Map a wire token to its operator.

    Raises:
        OperatorNotFoundError: If the token is not in the operator table.
    """
    if isinstance(token, RuleOperator):
        return token
    op = _BY_TOKEN.get(token.lower())
    if op is None:
        raise OperatorNotFoundError(token, list_available_operators())
    return op


def operator_token(op: RuleOperator) -> str:
    """Map an operator back to its wire token."""
    if op in DISPLAY_IDS:
        return op.value
    return RuleOperator.CONTAINS.value


def get_localized_operator(
    op: RuleOperator,
    localize: Callable[[int], str] | None = None,
) -> str:
    """
    Return the display string for *op*.

    *localize* maps a display-string id to text; without it the built-in
    English labels are used.
    """
    lookup = localize if localize is not None else DEFAULT_LABELS.__getitem__
    return lookup(DISPLAY_IDS.get(op, FALLBACK_DISPLAY_ID))


def list_available_operators() -> list[str]:
    """All operator tokens in table order, for populating UI choices."""
    return [op.value for op in RuleOperator]
