"""
Combination — AND/OR node of a filter tree.

A combination owns an ordered list of nested combinations and an ordered
list of rules.  Compilation emits the nested combinations first, then the
rules, each parenthesized and joined by the node's connective.

Structured form::

    {"and": [{"or": [...]}, {"field": "genre", "operator": "is", "value": ["Rock"]}]}

A bare list is accepted on load as shorthand for ``{"and": [...]}``.
The markup form is save-only and flat: nesting is not preserved.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import FilterValidationError

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from .backend import QueryBackend
    from .factory import RuleFactory
    from .rule import Rule

logger = logging.getLogger(__name__)


class CombinationType(str, Enum):
    """Connective joining a combination's children."""

    AND = "and"
    OR = "or"

    @property
    def sql(self) -> str:
        return " AND " if self is CombinationType.AND else " OR "

    @property
    def neutral(self) -> str:
        """Literal standing in for an empty child clause."""
        return "'1'" if self is CombinationType.AND else "'0'"


class Combination:
    """Boolean node owning nested combinations and rules."""

    def __init__(self, type: CombinationType = CombinationType.AND) -> None:
        self.type = type
        self.rules: list[Rule] = []
        self.combinations: list[Combination] = []

    def __repr__(self) -> str:
        return (
            f"Combination(type={self.type.value!r}, "
            f"combinations={self.combinations!r}, rules={self.rules!r})"
        )

    def clear(self) -> None:
        """Reset to an empty AND combination."""
        self.combinations.clear()
        self.rules.clear()
        self.type = CombinationType.AND

    def add_rule(self, rule: Rule) -> Combination:
        self.rules.append(rule)
        return self

    def add_combination(self, combination: Combination) -> Combination:
        self.combinations.append(combination)
        return self

    def is_empty(self) -> bool:
        return not self.combinations and not self.rules

    def translate_combination_type(self) -> str:
        return self.type.value

    def iter_rules(self) -> list[Rule]:
        """Every rule in the tree, in compilation order."""
        found: list[Rule] = []
        for combination in self.combinations:
            found.extend(combination.iter_rules())
        found.extend(self.rules)
        return found

    # -- compilation ---------------------------------------------------------

    def get_where_clause(self, backend: QueryBackend, context: str = "") -> str:
        """Compile the tree rooted here into a WHERE-clause fragment."""
        parts = [
            f"({combination.get_where_clause(backend, context)})"
            for combination in self.combinations
        ]
        for rule in self.rules:
            clause = rule.get_where_clause(backend, context)
            # An empty clause must neither exclude nor include everything.
            if not clause:
                logger.debug(
                    "Empty clause for %r replaced by %s", rule, self.type.neutral
                )
                clause = self.type.neutral
            parts.append(f"({clause})")
        return self.type.sql.join(parts)

    # -- structured serialisation --------------------------------------------

    def load(self, obj: Any, factory: RuleFactory) -> bool:
        """
        Load from ``{"and": [...]}``, ``{"or": [...]}`` or a bare list.

        Children that are not objects are skipped; children whose own load
        fails are dropped.
        """
        if isinstance(obj, list):
            children = obj
        elif isinstance(obj, dict):
            if isinstance(obj.get("and"), list):
                self.type = CombinationType.AND
                children = obj["and"]
            elif isinstance(obj.get("or"), list):
                self.type = CombinationType.OR
                children = obj["or"]
            else:
                logger.debug("Combination object without 'and'/'or' list: %r", obj)
                return False
        else:
            return False

        for child in children:
            if not isinstance(child, dict):
                continue

            if "and" in child or "or" in child:
                combination = factory.create_combination()
                if combination is not None and combination.load(child, factory):
                    self.combinations.append(combination)
                else:
                    logger.debug("Dropped nested combination %r", child)
            else:
                rule = factory.create_rule()
                if rule is not None and rule.load(child):
                    self.rules.append(rule)
                else:
                    logger.debug("Dropped rule %r", child)
        return True

    def save(self, obj: dict[str, Any] | None) -> bool:
        """Write ``{"and"|"or": [...]}`` into *obj*; combinations precede rules."""
        if obj is None or self.is_empty():
            return False

        children: list[dict[str, Any]] = []
        for combination in self.combinations:
            combination_obj: dict[str, Any] = {}
            if combination.save(combination_obj):
                children.append(combination_obj)
        for rule in self.rules:
            rule_obj: dict[str, Any] = {}
            if rule.save(rule_obj):
                children.append(rule_obj)

        obj[self.translate_combination_type()] = children
        return True

    def to_dict(self) -> dict[str, Any]:
        """
        Return the structured form.

        Raises:
            FilterValidationError: If the combination has no children.
        """
        data: dict[str, Any] = {}
        if not self.save(data):
            raise FilterValidationError("Cannot serialize an empty combination")
        return data

    # -- markup serialisation ------------------------------------------------

    def save_xml(self, parent: Element | None) -> bool:
        """Append every rule of the tree to *parent* as flat ``<rule>`` elements."""
        if parent is None:
            return False
        for rule in self.iter_rules():
            rule.save_xml(parent)
        return True
