"""Tests for compiling rules into WHERE-clause fragments."""

from __future__ import annotations

import datetime

import pytest
from sqlalchemy.dialects import postgresql

from query_rules import Rule, RuleOperator, SQLAlchemyBackend, StaticFieldCatalog
from query_rules.fields import FieldDefinition

Op = RuleOperator

# -- text fields --------------------------------------------------------------


@pytest.mark.parametrize(
    ("op", "expected"),
    [
        (Op.CONTAINS, "(items.title LIKE '%foo%')"),
        (Op.DOES_NOT_CONTAIN, "(items.title NOT LIKE '%foo%')"),
        (Op.EQUALS, "(items.title LIKE 'foo')"),
        (Op.DOES_NOT_EQUAL, "(items.title NOT LIKE 'foo')"),
        (Op.STARTS_WITH, "(items.title LIKE 'foo%')"),
        (Op.ENDS_WITH, "(items.title LIKE '%foo')"),
        (Op.GREATER_THAN, "(items.title > 'foo')"),
        (Op.LESS_THAN, "(items.title < 'foo')"),
    ],
)
def test_text_operators(make_rule, backend, op, expected):
    assert make_rule("title", op, "foo").get_where_clause(backend) == expected


def test_multiple_parameters_are_ored(make_rule, backend):
    rule = make_rule("title", Op.EQUALS, "a", "b")
    assert rule.get_where_clause(backend) == (
        "(items.title LIKE 'a') OR (items.title LIKE 'b')"
    )


def test_parameters_are_escaped(make_rule, backend):
    rule = make_rule("title", Op.CONTAINS, "it's")
    assert rule.get_where_clause(backend) == "(items.title LIKE '%it''s%')"


def test_percent_survives_percent_doubling_dialect(make_rule):
    backend = SQLAlchemyBackend(postgresql.dialect())
    rule = make_rule("title", Op.GREATER_THAN, "50%")
    assert rule.get_where_clause(backend) == "(items.title > '50%')"


def test_no_parameters_compiles_to_empty(make_rule, backend):
    assert make_rule("title", Op.CONTAINS).get_where_clause(backend) == ""


# -- numeric and duration fields ---------------------------------------------


def test_numeric_equals_is_unquoted(make_rule, backend):
    rule = make_rule("rating", Op.EQUALS, "7")
    assert rule.get_where_clause(backend) == "(CAST(items.rating as DECIMAL(5,1)) = 7)"


def test_numeric_does_not_equal_has_no_not(make_rule, backend):
    rule = make_rule("rating", Op.DOES_NOT_EQUAL, "5")
    clause = rule.get_where_clause(backend)
    assert clause == "(CAST(items.rating as DECIMAL(5,1)) != 5)"
    assert "NOT" not in clause


def test_numeric_greater_than(make_rule, backend):
    rule = make_rule("rating", Op.GREATER_THAN, "7")
    assert rule.get_where_clause(backend) == "(CAST(items.rating as DECIMAL(5,1)) > 7)"


def test_seconds_less_than(make_rule, backend):
    rule = make_rule("duration", Op.LESS_THAN, "300")
    assert rule.get_where_clause(backend) == "(CAST(items.duration as INTEGER) < 300)"


def test_numeric_contains_still_uses_like(make_rule, backend):
    rule = make_rule("rating", Op.CONTAINS, "7")
    assert rule.get_where_clause(backend) == (
        "(CAST(items.rating as DECIMAL(5,1)) LIKE '%7%')"
    )


def test_numeric_rejects_non_numeric_values(make_rule, backend):
    rule = make_rule("rating", Op.EQUALS, "1 OR 1=1")
    assert rule.get_where_clause(backend) == ""


def test_numeric_keeps_only_numeric_values(make_rule, backend):
    rule = make_rule("duration", Op.GREATER_THAN, "60", "0; DELETE FROM items", "1e2")
    assert rule.get_where_clause(backend) == (
        "(CAST(items.duration as INTEGER) > 60)"
        " OR (CAST(items.duration as INTEGER) > 1e2)"
    )


def test_numeric_quoted_template_accepts_any_text(make_rule, backend):
    rule = make_rule("rating", Op.STARTS_WITH, "8 OR 1=1")
    assert rule.get_where_clause(backend) == (
        "(CAST(items.rating as DECIMAL(5,1)) LIKE '8 OR 1=1%')"
    )


# -- between ------------------------------------------------------------------


def test_between_numeric(make_rule, backend):
    rule = make_rule("rating", Op.BETWEEN, "1", "10")
    assert rule.get_where_clause(backend) == (
        "CAST(items.rating as DECIMAL(5,1)) BETWEEN 1 AND 10"
    )


def test_between_seconds(make_rule, backend):
    rule = make_rule("duration", Op.BETWEEN, "60", "120")
    assert rule.get_where_clause(backend) == (
        "CAST(items.duration as INTEGER) BETWEEN 60 AND 120"
    )


def test_between_text_is_quoted(make_rule, backend):
    rule = make_rule("title", Op.BETWEEN, "a", "m")
    assert rule.get_where_clause(backend) == "items.title BETWEEN 'a' AND 'm'"


def test_between_text_bounds_are_escaped(make_rule, backend):
    rule = make_rule("title", Op.BETWEEN, "a'", "m")
    assert rule.get_where_clause(backend) == "items.title BETWEEN 'a''' AND 'm'"


@pytest.mark.parametrize(
    ("token", "values"),
    [("rating", ("1", "1) OR (1=1")), ("duration", ("x", "10"))],
)
def test_between_numeric_rejects_non_numeric_bounds(make_rule, backend, token, values):
    rule = make_rule(token, Op.BETWEEN, *values)
    assert rule.get_where_clause(backend) == ""


@pytest.mark.parametrize("values", [(), ("1",), ("1", "5", "10")])
def test_between_wrong_arity_is_empty(make_rule, backend, values):
    rule = make_rule("rating", Op.BETWEEN, *values)
    assert rule.get_where_clause(backend) == ""


# -- dates --------------------------------------------------------------------


def test_after_date_is_quoted(make_rule, backend):
    rule = make_rule("dateadded", Op.AFTER, "2020-01-01")
    assert rule.get_where_clause(backend) == "(items.date_added > '2020-01-01')"


def test_in_the_last_resolves_relative_date(make_rule, backend, now):
    rule = make_rule("dateadded", Op.IN_THE_LAST, "1 months")
    expected = (now - datetime.timedelta(days=31)).strftime("%Y-%m-%d")
    assert expected == "2026-09-18"
    assert rule.get_where_clause(backend) == f"(items.date_added > '{expected}')"


def test_not_in_the_last_resolves_relative_date(make_rule, backend):
    rule = make_rule("dateadded", Op.NOT_IN_THE_LAST, "2 weeks")
    assert rule.get_where_clause(backend) == "(items.date_added < '2026-10-05')"


def test_in_the_last_on_text_field_is_literal(make_rule, backend):
    rule = make_rule("title", Op.IN_THE_LAST, "2 weeks")
    assert rule.get_where_clause(backend) == "(items.title > '2 weeks')"


def test_custom_date_format(make_rule, now):
    backend = SQLAlchemyBackend(date_format="%d/%m/%Y", clock=lambda: now)
    rule = make_rule("dateadded", Op.IN_THE_LAST, "1")
    assert rule.get_where_clause(backend) == "(items.date_added > '18/10/2026')"


# -- text-in-list fields ------------------------------------------------------


def test_text_in_builds_in_list(make_rule, backend):
    rule = make_rule("genre", Op.EQUALS, "Rock, Pop")
    assert rule.get_where_clause(backend) == "(items.genre IN ('Rock','Pop'))"


def test_text_in_ignores_operator_template(make_rule, backend):
    rule = make_rule("genre", Op.CONTAINS, "Jazz")
    assert rule.get_where_clause(backend) == "(items.genre IN ('Jazz'))"


def test_text_in_negated(make_rule, backend):
    rule = make_rule("genre", Op.DOES_NOT_EQUAL, "Rock")
    assert rule.get_where_clause(backend) == "(items.genre NOT IN ('Rock'))"


def test_text_in_pieces_are_escaped(make_rule, backend):
    rule = make_rule("genre", Op.EQUALS, "Rock 'n' Roll,Blues")
    assert rule.get_where_clause(backend) == (
        "(items.genre IN ('Rock ''n'' Roll','Blues'))"
    )


# -- boolean rules ------------------------------------------------------------


def test_true_rule_delegates_to_boolean_query(make_rule, backend):
    assert make_rule("watched", Op.TRUE).get_where_clause(backend) == (
        "items.watched = 1"
    )


def test_false_rule_is_negated(make_rule, backend):
    assert make_rule("watched", Op.FALSE).get_where_clause(backend) == (
        "NOT (items.watched = 1)"
    )


def test_boolean_rule_ignores_parameters(make_rule, backend):
    rule = make_rule("watched", Op.TRUE, "ignored")
    assert rule.get_where_clause(backend) == "items.watched = 1"


def test_boolean_hook_override(backend):
    class PlaycountCatalog(StaticFieldCatalog):
        def boolean_query(self, field_id, negate, context=""):
            return "items.playcount > 0" if not negate else "items.playcount = 0"

    catalog = PlaycountCatalog([FieldDefinition(token="watched", type="boolean")])
    rule = Rule("watched", Op.FALSE, catalog=catalog)
    assert rule.get_where_clause(backend) == "items.playcount = 0"


# -- degenerate clauses -------------------------------------------------------


def test_empty_expression_collapses_to_one(make_rule, backend):
    rule = make_rule("virtual", Op.CONTAINS, "x")
    assert rule.get_where_clause(backend) == "(1)"


def test_negated_empty_expression_collapses_to_one(make_rule, backend):
    rule = make_rule("virtual", Op.DOES_NOT_CONTAIN, "x")
    assert rule.get_where_clause(backend) == "(1)"


def test_missing_field_collapses_to_one(make_rule, backend):
    rule = make_rule(None, Op.CONTAINS, "x")
    assert rule.get_where_clause(backend) == "(1)"


def test_format_where_clause_directly(make_rule, backend):
    rule = make_rule("title", Op.CONTAINS)
    clause = rule.format_where_clause(" NOT", " LIKE '%{}%'", "x", backend)
    assert clause == "items.title NOT LIKE '%x%'"


# -- contexts and operator hook -----------------------------------------------


def test_context_selects_expression(make_rule, backend):
    rule = make_rule("artist", Op.CONTAINS, "Queen")
    assert rule.get_where_clause(backend) == "(items.artist LIKE '%Queen%')"
    assert rule.get_where_clause(backend, "albums") == (
        "(albums.artist LIKE '%Queen%')"
    )


def test_resolve_operator_hook(backend):
    class FuzzyCatalog(StaticFieldCatalog):
        def resolve_operator(self, field_id, operator, context=""):
            if context == "fuzzy" and operator == RuleOperator.EQUALS:
                return RuleOperator.CONTAINS
            return operator

    catalog = FuzzyCatalog([FieldDefinition(token="title")])
    rule = Rule("title", Op.EQUALS, ["abc"], catalog=catalog)
    assert rule.get_where_clause(backend) == "(title LIKE 'abc')"
    assert rule.get_where_clause(backend, "fuzzy") == "(title LIKE '%abc%')"


# -- operator templates -------------------------------------------------------


def test_operator_string_for_text_in_is_empty(make_rule):
    assert make_rule("genre", Op.EQUALS).get_operator_string(Op.EQUALS) == ""


def test_operator_string_between_is_empty(make_rule):
    assert make_rule("rating", Op.BETWEEN).get_operator_string(Op.BETWEEN) == ""


@pytest.mark.parametrize(
    ("op", "expected"),
    [(Op.TRUE, " = 1"), (Op.FALSE, " = 0"), (Op.AFTER, " > '{}'")],
)
def test_operator_string_text(make_rule, op, expected):
    assert make_rule("title", op).get_operator_string(op) == expected
