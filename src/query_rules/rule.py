"""
Rule — a single leaf predicate of a filter.

A rule pairs a field with an operator and an ordered list of string
parameters.  It compiles to a WHERE-clause fragment and serializes to and
from two formats:

- markup: ``<rule field="genre" operator="is"><value>Rock</value></rule>``
- structured: ``{"field": "genre", "operator": "is", "value": ["Rock"]}``

A rule with several parameters matches when the field matches ANY of them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

from .exceptions import FilterValidationError
from .fields import FieldType
from .operators import (
    BOOLEAN_OPERATORS,
    RuleOperator,
    operator_token,
    translate_operator,
)
from .utils import (
    is_number,
    parse_period,
    split_list_value,
    split_parameters,
    to_utf8,
)

if TYPE_CHECKING:
    from .backend import QueryBackend
    from .fields import FieldCatalog

logger = logging.getLogger(__name__)

RULE_VALUE_SEPARATOR = " / "

_NUMERIC_TYPES = frozenset({FieldType.NUMERIC, FieldType.SECONDS})
_NEGATE = " NOT"
# Clause used when the field has no backend expression.
_ALWAYS_TRUE = "1"


class Rule:
    """
    Leaf predicate: ``field`` ``operator`` ``parameters``.

    The :class:`FieldCatalog` MUST be provided explicitly; it supplies
    field translation, type classification and backend expressions.
    """

    def __init__(
        self,
        field: Any | None = None,
        operator: RuleOperator = RuleOperator.CONTAINS,
        parameters: Sequence[str] | None = None,
        *,
        catalog: FieldCatalog,
    ) -> None:
        if catalog is None:
            raise ValueError("catalog parameter is required")
        self.field = field
        self.operator = operator
        self.parameters: list[str] = list(parameters) if parameters else []
        self._catalog = catalog

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    def __repr__(self) -> str:
        return (
            f"Rule(field={self.field!r}, operator={self.operator.value!r}, "
            f"parameters={self.parameters!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rule):
            return NotImplemented
        return (
            self.field == other.field
            and self.operator == other.operator
            and self.parameters == other.parameters
        )

    # -- parameter accessors -------------------------------------------------

    @property
    def parameter(self) -> str:
        """All parameters joined with ``" / "``."""
        return RULE_VALUE_SEPARATOR.join(self.parameters)

    @parameter.setter
    def parameter(self, value: str) -> None:
        self.parameters = split_parameters(value, RULE_VALUE_SEPARATOR)

    def set_parameters(self, values: Sequence[str]) -> None:
        """Replace the parameter list as-is (no splitting)."""
        self.parameters = list(values)

    @property
    def field_type(self) -> FieldType:
        return self._catalog.field_type(self.field)

    def _can_save(self) -> bool:
        return bool(self.parameters) or self.operator in BOOLEAN_OPERATORS

    # -- markup serialisation ------------------------------------------------

    def load_xml(
        self,
        element: ElementTree.Element | None,
        encoding: str = "UTF-8",
        converter: Callable[[str, str], str] | None = None,
    ) -> bool:
        """
        Load from a ``<rule>`` element.

        The parameter is either the element's text or a list of ``<value>``
        children.  *converter* turns text declared in *encoding* into UTF-8.
        """
        if not isinstance(element, ElementTree.Element):
            return False

        field = element.get("field")
        oper = element.get("operator")
        if field is None or oper is None:
            logger.debug("Rule element missing 'field' or 'operator' attribute")
            return False

        self.field = self._catalog.translate_field(field)
        self.operator = translate_operator(oper)

        if self.operator in BOOLEAN_OPERATORS:
            return True

        convert = converter or to_utf8
        text = (element.text or "").strip()
        children = list(element)

        if text:
            self._append_parameter(convert(text, encoding))
            return True

        if not children or any(child.tag != "value" for child in children):
            logger.debug("Rule %r has no text and no <value> children", field)
            return False

        for child in children:
            if child.text:
                self._append_parameter(convert(child.text.strip(), encoding))
        return True

    def save_xml(self, parent: ElementTree.Element | None) -> bool:
        """Append this rule to *parent* as a ``<rule>`` element."""
        if parent is None or not self._can_save():
            return False

        rule = ElementTree.SubElement(
            parent,
            "rule",
            {
                "field": self._catalog.field_token(self.field),
                "operator": operator_token(self.operator),
            },
        )
        for param in self.parameters:
            ElementTree.SubElement(rule, "value").text = param
        return True

    # -- structured serialisation --------------------------------------------

    def load(self, obj: Any) -> bool:
        """Load from a ``{"field", "operator", "value"}`` mapping."""
        if (
            not isinstance(obj, dict)
            or not isinstance(obj.get("field"), str)
            or not isinstance(obj.get("operator"), str)
        ):
            logger.debug("Rule object missing string 'field'/'operator': %r", obj)
            return False

        self.field = self._catalog.translate_field(obj["field"])
        self.operator = translate_operator(obj["operator"])

        if self.operator in BOOLEAN_OPERATORS:
            return True

        value = obj.get("value")
        if isinstance(value, str) and value:
            self.parameters.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    self._append_parameter(item)
        else:
            logger.debug("Rule %r has unusable 'value': %r", obj["field"], value)
            return False
        return True

    def save(self, obj: dict[str, Any] | None) -> bool:
        """Write the structured form into *obj*."""
        if obj is None or not self._can_save():
            return False

        obj["field"] = self._catalog.field_token(self.field)
        obj["operator"] = operator_token(self.operator)
        obj["value"] = list(self.parameters)
        return True

    def to_dict(self) -> dict[str, Any]:
        """
        Return the structured form.

        Raises:
            FilterValidationError: If the rule has no parameters and is not
                a TRUE/FALSE rule.
        """
        data: dict[str, Any] = {}
        if not self.save(data):
            raise FilterValidationError(
                f"Rule on '{self._catalog.field_token(self.field)}' with operator "
                f"'{self.operator.value}' requires at least one value",
            )
        return data

    @classmethod
    def from_dict(cls, data: Any, *, catalog: FieldCatalog) -> Rule:
        """
        Build a rule from its structured form.

        Raises:
            FilterValidationError: If *data* is not a valid rule object.
        """
        rule = cls(catalog=catalog)
        if not rule.load(data):
            raise FilterValidationError(f"Invalid rule object: {data!r}")
        return rule

    def _append_parameter(self, value: str) -> None:
        if value:
            self.parameters.append(value)

    # -- compilation ---------------------------------------------------------

    def get_operator_string(self, op: RuleOperator) -> str:
        """Comparison template for *op*; ``{}`` marks the parameter slot."""
        field_type = self.field_type
        if field_type == FieldType.TEXT_IN:
            return ""
        numeric = field_type in _NUMERIC_TYPES

        if op in (RuleOperator.CONTAINS, RuleOperator.DOES_NOT_CONTAIN):
            return " LIKE '%{}%'"
        if op == RuleOperator.EQUALS:
            return " = {}" if numeric else " LIKE '{}'"
        if op == RuleOperator.DOES_NOT_EQUAL:
            return " != {}" if numeric else " LIKE '{}'"
        if op == RuleOperator.STARTS_WITH:
            return " LIKE '{}%'"
        if op == RuleOperator.ENDS_WITH:
            return " LIKE '%{}'"
        if op in (
            RuleOperator.AFTER,
            RuleOperator.GREATER_THAN,
            RuleOperator.IN_THE_LAST,
        ):
            return " > {}" if numeric else " > '{}'"
        if op in (
            RuleOperator.BEFORE,
            RuleOperator.LESS_THAN,
            RuleOperator.NOT_IN_THE_LAST,
        ):
            return " < {}" if numeric else " < '{}'"
        if op == RuleOperator.TRUE:
            return " = 1"
        if op == RuleOperator.FALSE:
            return " = 0"
        return ""

    def format_parameter(
        self,
        template: str,
        param: str,
        backend: QueryBackend,
        context: str = "",
    ) -> str:
        """Render one parameter into its comparison."""
        field_type = self.field_type

        if field_type == FieldType.TEXT_IN:
            pieces = ",".join(
                backend.prepare("'{}'", piece) for piece in split_list_value(param)
            )
            return f" IN ({pieces})"

        if field_type == FieldType.DATE and self.operator in (
            RuleOperator.IN_THE_LAST,
            RuleOperator.NOT_IN_THE_LAST,
        ):
            date = backend.now() - parse_period(param)
            return backend.prepare(template, backend.format_date(date))

        return backend.prepare(template, param)

    def get_where_clause(self, backend: QueryBackend, context: str = "") -> str:
        """Compile this rule into a WHERE-clause fragment."""
        op = self._catalog.resolve_operator(self.field, self.operator, context)
        field_type = self.field_type

        template = self.get_operator_string(op)
        negate = ""
        if op in (RuleOperator.DOES_NOT_CONTAIN, RuleOperator.FALSE) or (
            op == RuleOperator.DOES_NOT_EQUAL and field_type not in _NUMERIC_TYPES
        ):
            negate = _NEGATE

        # Boolean rules carry no parameters; the catalog decides the predicate.
        if self.operator in BOOLEAN_OPERATORS:
            return self._catalog.boolean_query(self.field, negate, context)

        if op == RuleOperator.BETWEEN:
            return self._between_clause(backend, context)

        parameters = self.parameters
        # Numeric templates are unquoted; only numeric literals may fill them.
        if field_type in _NUMERIC_TYPES and "'" not in template:
            parameters = [p for p in parameters if is_number(p)]
            if len(parameters) != len(self.parameters):
                logger.debug(
                    "Dropped non-numeric values for %r: %r",
                    self.field,
                    [p for p in self.parameters if not is_number(p)],
                )

        return " OR ".join(
            f"({self.format_where_clause(negate, template, param, backend, context)})"
            for param in parameters
        )

    def _between_clause(self, backend: QueryBackend, context: str) -> str:
        if len(self.parameters) != 2:
            logger.debug(
                "BETWEEN on %r needs 2 values, got %d; emitting empty clause",
                self.field,
                len(self.parameters),
            )
            return ""

        field_type = self.field_type
        if field_type in _NUMERIC_TYPES and not all(
            is_number(p) for p in self.parameters
        ):
            logger.debug(
                "BETWEEN on %r has non-numeric bounds %r; emitting empty clause",
                self.field,
                self.parameters,
            )
            return ""

        expression = self._catalog.field_expression(self.field, context)
        low, high = (backend.prepare("{}", p) for p in self.parameters)
        if field_type == FieldType.NUMERIC:
            return f"CAST({expression} as DECIMAL(5,1)) BETWEEN {low} AND {high}"
        if field_type == FieldType.SECONDS:
            return f"CAST({expression} as INTEGER) BETWEEN {low} AND {high}"
        return f"{expression} BETWEEN '{low}' AND '{high}'"

    def format_where_clause(
        self,
        negate: str,
        template: str,
        param: str,
        backend: QueryBackend,
        context: str = "",
    ) -> str:
        """Single-parameter predicate: ``<expr><negate><comparison>``."""
        parameter = self.format_parameter(template, param, backend, context)

        query = ""
        if self.field is not None:
            expression = self._catalog.field_expression(self.field, context)
            field_type = self.field_type
            if expression and field_type == FieldType.NUMERIC:
                expression = f"CAST({expression} as DECIMAL(5,1))"
            elif expression and field_type == FieldType.SECONDS:
                expression = f"CAST({expression} as INTEGER)"
            query = expression + negate + parameter

        if query in ("", negate + parameter):
            logger.debug("No expression for field %r; clause reduced to 1", self.field)
            return _ALWAYS_TRUE
        return query
