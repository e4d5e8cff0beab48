"""
Field catalog abstraction.

Rules never hard-code which field has which type or which column it maps
to.  The host supplies that knowledge through a :class:`FieldCatalog`:
token ↔ id translation, value-type classification and backend expression
text.  :class:`StaticFieldCatalog` is a ready-made catalog built from
declarative :class:`FieldDefinition` records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import FilterValidationError
from .operators import RuleOperator


class FieldType(str, Enum):
    """Value-type class of a field, driving comparison formatting."""

    TEXT = "text"
    NUMERIC = "numeric"
    SECONDS = "seconds"
    DATE = "date"
    TEXT_IN = "textin"
    BOOLEAN = "boolean"


class FieldCatalog(ABC):
    """
    Host-supplied knowledge about filterable fields.

    Field ids are opaque to the core; ``None`` means "no field".
    """

    @abstractmethod
    def translate_field(self, token: str) -> Any | None:
        """Map a serialized field token to a field id (``None`` if unknown)."""
        ...

    @abstractmethod
    def field_token(self, field_id: Any) -> str:
        """Map a field id back to its serialized token."""
        ...

    @abstractmethod
    def field_type(self, field_id: Any) -> FieldType:
        ...

    @abstractmethod
    def field_expression(self, field_id: Any, context: str = "") -> str:
        """
        Backend expression text for *field_id* in *context*.

        An empty string means the field cannot be expressed in this context.
        """
        ...

    # -- overridable hooks ---------------------------------------------------

    def boolean_query(self, field_id: Any, negate: str, context: str = "") -> str:
        """
        Predicate for a TRUE/FALSE rule.

        *negate* is ``" NOT"`` for FALSE rules and empty for TRUE rules.
        """
        expression = self.field_expression(field_id, context)
        if not expression:
            return ""
        if negate:
            return f"NOT ({expression} = 1)"
        return f"{expression} = 1"

    def resolve_operator(
        self, field_id: Any, operator: RuleOperator, context: str = ""
    ) -> RuleOperator:
        """Operator actually compiled for *field_id* in *context*."""
        return operator

    def available_fields(self) -> list[str]:
        """Known field tokens, used for error suggestions."""
        return []


class FieldDefinition(BaseModel):
    """
    Declarative description of one filterable field.

    Attributes:
        token: Serialized name (``"genre"``).  Matched case-insensitively.
        id: Opaque id stored on rules.  Defaults to the token.
        type: Value-type class.
        expression: Backend expression.  Defaults to the token.
        contexts: Per-context expression overrides (e.g. ``{"albums": "a.genre"}``).
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1)
    id: int | str | None = None
    type: FieldType = FieldType.TEXT
    expression: str | None = None
    contexts: dict[str, str] = Field(default_factory=dict)

    @property
    def field_id(self) -> int | str:
        return self.id if self.id is not None else self.token

    def expression_for(self, context: str) -> str:
        if context in self.contexts:
            return self.contexts[context]
        return self.expression if self.expression is not None else self.token


class FieldCatalogConfig(BaseModel):
    """Configuration payload accepted by :meth:`StaticFieldCatalog.from_config`."""

    fields: list[FieldDefinition]


class StaticFieldCatalog(FieldCatalog):
    """
    :class:`FieldCatalog` backed by a fixed list of definitions.

    Usage::

        catalog = StaticFieldCatalog.from_config(
            {
                "fields": [
                    {"token": "title"},
                    {"token": "rating", "type": "numeric"},
                    {"token": "dateadded", "type": "date", "expression": "added_at"},
                ]
            }
        )
    """

    def __init__(self, definitions: Iterable[FieldDefinition]) -> None:
        self._by_token: dict[str, FieldDefinition] = {}
        self._by_id: dict[Any, FieldDefinition] = {}
        for definition in definitions:
            self._by_token[definition.token.lower()] = definition
            self._by_id[definition.field_id] = definition

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> StaticFieldCatalog:
        """
        Build a catalog from a plain configuration mapping.

        Raises:
            FilterValidationError: If the configuration is malformed.
        """
        try:
            parsed = FieldCatalogConfig.model_validate(config)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first.get("loc", ("__root__",)))
            raise FilterValidationError(
                f"Invalid field catalog configuration: {first.get('msg')}",
                path=loc,
            ) from exc
        return cls(parsed.fields)

    def definition(self, field_id: Any) -> FieldDefinition | None:
        return self._by_id.get(field_id)

    def translate_field(self, token: str) -> Any | None:
        definition = self._by_token.get(token.lower())
        return definition.field_id if definition is not None else None

    def field_token(self, field_id: Any) -> str:
        definition = self._by_id.get(field_id)
        return definition.token if definition is not None else ""

    def field_type(self, field_id: Any) -> FieldType:
        definition = self._by_id.get(field_id)
        return definition.type if definition is not None else FieldType.TEXT

    def field_expression(self, field_id: Any, context: str = "") -> str:
        definition = self._by_id.get(field_id)
        return definition.expression_for(context) if definition is not None else ""

    def available_fields(self) -> list[str]:
        return [d.token for d in self._by_token.values()]
