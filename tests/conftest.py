"""Shared fixtures for query-rules tests."""

from __future__ import annotations

import datetime

import pytest

from query_rules import (
    DefaultRuleFactory,
    Rule,
    RuleOperator,
    SQLAlchemyBackend,
    StaticFieldCatalog,
)

FROZEN_NOW = datetime.datetime(2026, 10, 19, 12, 0, 0)

CATALOG_CONFIG = {
    "fields": [
        {"token": "title", "expression": "items.title"},
        {"token": "genre", "type": "textin", "expression": "items.genre"},
        {"token": "rating", "type": "numeric", "expression": "items.rating"},
        {"token": "duration", "type": "seconds", "expression": "items.duration"},
        {"token": "dateadded", "type": "date", "expression": "items.date_added"},
        {"token": "watched", "type": "boolean", "expression": "items.watched"},
        {
            "token": "artist",
            "expression": "items.artist",
            "contexts": {"albums": "albums.artist"},
        },
        {"token": "virtual", "expression": ""},
    ]
}


@pytest.fixture
def catalog() -> StaticFieldCatalog:
    """Catalog describing a single ``items`` table."""
    return StaticFieldCatalog.from_config(CATALOG_CONFIG)


@pytest.fixture
def backend() -> SQLAlchemyBackend:
    """SQLite backend with a frozen clock."""
    return SQLAlchemyBackend(clock=lambda: FROZEN_NOW)


@pytest.fixture
def factory(catalog: StaticFieldCatalog) -> DefaultRuleFactory:
    return DefaultRuleFactory(catalog)


@pytest.fixture
def make_rule(catalog: StaticFieldCatalog):
    """Build a rule from a field token, operator and values."""

    def _make(token: str | None, op: RuleOperator, *values: str) -> Rule:
        field = catalog.translate_field(token) if token is not None else None
        return Rule(field, op, list(values), catalog=catalog)

    return _make


@pytest.fixture
def now() -> datetime.datetime:
    """The instant the ``backend`` fixture reports as current."""
    return FROZEN_NOW
