"""Validation rules. Importing this package registers every rule."""

from batonsql.rules.ambiguous_columns import ambiguous_columns
from batonsql.rules.baton_parameters import baton_parameter_validation
from batonsql.rules.credentials import credential_mutual_exclusion
from batonsql.rules.duplicate_aliases import duplicate_aliases
from batonsql.rules.invalid_group_by import invalid_group_by
from batonsql.rules.invalid_join import invalid_join
from batonsql.rules.invalid_order_by import invalid_order_by
from batonsql.rules.keyword_spelling import keyword_spelling
from batonsql.rules.missing_comma import missing_comma
from batonsql.rules.missing_from import missing_from
from batonsql.rules.property_name_typos import property_name_typos
from batonsql.rules.registry import (
    RuleRegistry,
    RuleScope,
    UnknownRuleError,
    ValidationRule,
)
from batonsql.rules.trailing_comma import trailing_comma
from batonsql.rules.unclosed_parentheses import unclosed_parentheses
from batonsql.rules.unconventional_syntax import unconventional_sql_syntax
from batonsql.rules.vars_mismatch import vars_query_mismatch

# Evaluation order; decides which finding surfaces first for a query.
ALL_RULES: tuple[ValidationRule, ...] = (
    missing_comma,
    missing_from,
    unclosed_parentheses,
    invalid_join,
    ambiguous_columns,
    invalid_group_by,
    invalid_order_by,
    duplicate_aliases,
    keyword_spelling,
    property_name_typos,
    baton_parameter_validation,
    credential_mutual_exclusion,
    vars_query_mismatch,
    trailing_comma,
    unconventional_sql_syntax,
)

__all__ = [
    "ALL_RULES",
    "RuleRegistry",
    "RuleScope",
    "UnknownRuleError",
    "ValidationRule",
]
