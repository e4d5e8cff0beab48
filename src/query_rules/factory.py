"""
Creation factory and JSON helpers.

Deserializing a combination needs to instantiate concrete rule and
combination objects.  Which classes are used is the host's decision,
expressed as a :class:`RuleFactory` passed to :meth:`Combination.load`.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol

from .combination import Combination
from .exceptions import FilterValidationError
from .rule import Rule

if TYPE_CHECKING:
    from .fields import FieldCatalog


class RuleFactory(Protocol):
    """Instantiates empty nodes for deserialization."""

    def create_rule(self) -> Rule | None:
        ...

    def create_combination(self) -> Combination | None:
        ...


class DefaultRuleFactory:
    """Creates plain :class:`Rule` / :class:`Combination` nodes bound to *catalog*."""

    def __init__(
        self,
        catalog: FieldCatalog,
        *,
        rule_class: type[Rule] = Rule,
        combination_class: type[Combination] = Combination,
    ) -> None:
        self.catalog = catalog
        self._rule_class = rule_class
        self._combination_class = combination_class

    def create_rule(self) -> Rule:
        return self._rule_class(catalog=self.catalog)

    def create_combination(self) -> Combination:
        return self._combination_class()


class FilterFactory:
    """
    Raising front-end over :meth:`Combination.load` / :meth:`Combination.save`.

    Supports:
    - ``from_dict(data)`` — load a structured filter tree
    - ``from_json(text)`` — parse and load a JSON string
    - ``to_json(combination)`` — serialize a tree back to JSON
    """

    def __init__(self, factory: RuleFactory) -> None:
        self.factory = factory

    def from_dict(self, data: Any) -> Combination:
        """
        Build a combination tree from its structured form.

        Raises:
            FilterValidationError: If *data* is neither a list nor an
                ``and``/``or`` object.
        """
        root = self.factory.create_combination()
        if root is None:
            raise FilterValidationError(
                "Factory produced no combination", path="<root>"
            )
        if not root.load(data, self.factory):
            raise FilterValidationError(
                "Expected a list or an object with an 'and'/'or' list",
                path="<root>",
            )
        return root

    def from_json(self, text: str) -> Combination:
        """Parse a JSON string and build a combination tree."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FilterValidationError(
                f"Invalid JSON: {exc}",
                path="<root>",
            ) from exc

        if not isinstance(data, dict | list):
            raise FilterValidationError(
                "Top-level JSON value must be an object or an array",
                path="<root>",
            )
        return self.from_dict(data)

    @staticmethod
    def to_json(combination: Combination, **kwargs: Any) -> str:
        """Serialize *combination*; extra keyword arguments go to ``json.dumps``."""
        return json.dumps(combination.to_dict(), **kwargs)
