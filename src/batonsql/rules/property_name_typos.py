"""property-name-typos: misspelled ``static_entitlements`` keys."""

from __future__ import annotations

from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import RuleScope, rule

PROPERTY_TYPOS: dict[str, str] = {
    "static_entitlement": "static_entitlements",
    "staticentitlements": "static_entitlements",
    "static_entitlementz": "static_entitlements",
    "static_entitlementss": "static_entitlements",
    "staticentitlement": "static_entitlements",
    "static_entitlement_": "static_entitlements",
    "_static_entitlements": "static_entitlements",
}


@rule(
    "property-name-typos",
    "Check for common property name typos",
    scope=RuleScope.DOCUMENT,
)
def property_name_typos(sql: str, original_query: str) -> ValidationResult:
    for index, line in enumerate(original_query.split("\n")):
        if not line.strip():
            continue
        for typo, correction in PROPERTY_TYPOS.items():
            column = line.find(f"{typo}:")
            if column < 0:
                continue
            return ValidationResult.fail(
                f"Did you mean '{correction}' instead of '{typo}'?",
                line_number=index,
                suggested_fix=TextEdit(
                    range=Range.at(index, column, column + len(typo)),
                    new_text=correction,
                ),
            )
    return ValidationResult.ok()
