"""
Fluent builder for constructing filter trees.

Example::

    root = (
        FilterBuilder(catalog=catalog)
        .where("genre", "is", "Rock", "Blues")
        .or_group()
            .where("rating", "greaterthan", "7")
            .where("playcount", "is", "0")
        .end_group()
        .build()
    )
    # → AND(OR(rating > 7, playcount = 0), genre is Rock|Blues)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .combination import Combination, CombinationType
from .exceptions import FieldNotFoundError
from .operators import strict_translate_operator
from .rule import Rule

if TYPE_CHECKING:
    from .fields import FieldCatalog
    from .operators import RuleOperator


class FilterBuilder:
    """
    Fluent builder for composing :class:`Combination` trees.

    Conditions added at the same level are combined with AND by default.
    Use ``or_group()`` / ``and_group()`` for explicit grouping, and
    ``end_group()`` to close the current group.
    """

    def __init__(self, *, catalog: FieldCatalog) -> None:
        self._catalog = catalog
        self._root = Combination()
        self._stack: list[Combination] = []

    # -- leaf conditions -----------------------------------------------------

    def where(
        self,
        field: str,
        op: RuleOperator | str,
        *values: str,
    ) -> FilterBuilder:
        """
        Add a rule to the current group.

        Raises:
            FieldNotFoundError: If *field* is unknown to the catalog.
            OperatorNotFoundError: If *op* is not a known operator token.
        """
        field_id = self._catalog.translate_field(field)
        if field_id is None:
            raise FieldNotFoundError(field, self._catalog.available_fields())
        rule = Rule(
            field_id,
            strict_translate_operator(op),
            list(values),
            catalog=self._catalog,
        )
        self._current().add_rule(rule)
        return self

    def add(self, rule: Rule) -> FilterBuilder:
        """Add an already-constructed rule to the current group."""
        self._current().add_rule(rule)
        return self

    # -- grouping ------------------------------------------------------------

    def and_group(self) -> FilterBuilder:
        """Open a new AND group.  Close with ``end_group()``."""
        self._stack.append(Combination(CombinationType.AND))
        return self

    def or_group(self) -> FilterBuilder:
        """Open a new OR group.  Close with ``end_group()``."""
        self._stack.append(Combination(CombinationType.OR))
        return self

    def end_group(self) -> FilterBuilder:
        """Close the current group and add it to the parent."""
        if not self._stack:
            raise ValueError("No open group to close")
        group = self._stack.pop()
        if group.is_empty():
            raise ValueError("Cannot create an empty group")
        self._current().add_combination(group)
        return self

    # -- build ---------------------------------------------------------------

    def build(self) -> Combination:
        """
        Finalise and return the root combination.

        Raises:
            ValueError: If groups are still open or no conditions were added.
        """
        if self._stack:
            raise ValueError(
                f"{len(self._stack)} group(s) still open; "
                f"call end_group() before build()"
            )
        if self._root.is_empty():
            raise ValueError("No conditions added to builder")
        return self._root

    def reset(self) -> FilterBuilder:
        """Start over with an empty tree and return ``self`` for reuse."""
        self._root = Combination()
        self._stack.clear()
        return self

    def _current(self) -> Combination:
        if self._stack:
            return self._stack[-1]
        return self._root
