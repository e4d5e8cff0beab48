"""
Query backend strategy.

A backend provides the injection-safe substitution primitive used to put
rule parameters into comparison templates, plus the date literal format
used for relative-date rules.  Templates use ``{}`` as their placeholder;
escaping never adds quotes, so templates carry their own quoting.

:class:`SQLAlchemyBackend` escapes through a SQLAlchemy dialect's string
literal rendering.
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import String
from sqlalchemy.dialects import sqlite

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect


class QueryBackend(ABC):
    """Strategy interface for rendering parameters into a query fragment."""

    date_format: str = "%Y-%m-%d"

    @abstractmethod
    def escape(self, value: str) -> str:
        """Escape *value* for use inside a quoted string literal."""
        ...

    def prepare(self, template: str, *values: Any) -> str:
        """Substitute escaped *values* into the ``{}`` slots of *template*."""
        return template.format(*(self.escape(str(v)) for v in values))

    def format_date(self, value: datetime.datetime) -> str:
        """Render *value* as the backend's date literal (unquoted)."""
        return value.strftime(self.date_format)

    def now(self) -> datetime.datetime:
        return datetime.datetime.now()


class SQLAlchemyBackend(QueryBackend):
    """
    Backend escaping values with a SQLAlchemy dialect.

    Args:
        dialect: Target dialect.  Defaults to SQLite.
        date_format: ``strftime`` format of date literals.
        clock: Optional callable returning the current datetime, used to
            resolve relative periods (``"in the last 2 weeks"``).
    """

    def __init__(
        self,
        dialect: Dialect | None = None,
        *,
        date_format: str = "%Y-%m-%d",
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self.dialect = dialect if dialect is not None else sqlite.dialect()
        self.date_format = date_format
        self._clock = clock
        processor = String().literal_processor(dialect=self.dialect)
        if processor is None:
            raise ValueError(
                f"Dialect {self.dialect.name!r} cannot render string literals"
            )
        self._literal: Callable[[str], str] = processor
        self._double_percents = bool(
            getattr(self.dialect.identifier_preparer, "_double_percents", False)
        )

    def escape(self, value: str) -> str:
        # The dialect renders a complete quoted literal; keep the inside.
        escaped = self._literal(value)[1:-1]
        # format/pyformat dialects double '%' for the DBAPI; templates don't.
        if self._double_percents:
            escaped = escaped.replace("%%", "%")
        return escaped

    def now(self) -> datetime.datetime:
        if self._clock is not None:
            return self._clock()
        return super().now()
