from .backend import QueryBackend, SQLAlchemyBackend
from .builder import FilterBuilder
from .combination import Combination, CombinationType
from .exceptions import (
    FieldNotFoundError,
    FilterValidationError,
    OperatorNotFoundError,
    QueryRulesError,
)
from .factory import DefaultRuleFactory, FilterFactory, RuleFactory
from .fields import FieldCatalog, FieldDefinition, FieldType, StaticFieldCatalog
from .operators import (
    RuleOperator,
    get_localized_operator,
    list_available_operators,
    operator_token,
    strict_translate_operator,
    translate_operator,
)
from .rule import RULE_VALUE_SEPARATOR, Rule
from .utils import is_number, parse_period, split_list_value, to_utf8

__all__ = [
    # Core types
    "RuleOperator",
    "Rule",
    "Combination",
    "CombinationType",
    "RULE_VALUE_SEPARATOR",
    # Operator table
    "translate_operator",
    "strict_translate_operator",
    "operator_token",
    "get_localized_operator",
    "list_available_operators",
    # Fields
    "FieldType",
    "FieldCatalog",
    "FieldDefinition",
    "StaticFieldCatalog",
    # Backend
    "QueryBackend",
    "SQLAlchemyBackend",
    # Factory / builder
    "RuleFactory",
    "DefaultRuleFactory",
    "FilterFactory",
    "FilterBuilder",
    # Exceptions
    "QueryRulesError",
    "FilterValidationError",
    "OperatorNotFoundError",
    "FieldNotFoundError",
    # Utilities
    "is_number",
    "parse_period",
    "split_list_value",
    "to_utf8",
]
