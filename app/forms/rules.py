"""
Per-field validation rules for the patient record form.

Rules are shaped like a form library's register options: an optional
``required`` message, an optional ``pattern`` and at most one custom
``validate`` callable.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable

from app.forms.models import (
    REQUIRED_FIELD_ERROR_MESSAGE,
    DataType,
    FieldConfig,
    InputType,
    PatternRule,
    ValidationRules,
    Validator,
)
from app.forms.triggers import evaluate_field_triggers, parse_iso_datetime

PATTERN_RULES: dict[DataType, PatternRule] = {
    DataType.ZIP: PatternRule(re.compile(r"^\d{5}(-\d{4})?$"), "Must be 5 digits"),
    DataType.PHONE_NUMBER: PatternRule(
        re.compile(r"^\(\d{3}\) \d{3}-\d{4}$"),
        "Phone number must be 10 digits in the format (xxx) xxx-xxxx",
    ),
    DataType.SSN: PatternRule(re.compile(r"^\d{3}-\d{2}-\d{4}$"), "Please enter a valid SSN"),
    DataType.EMAIL: PatternRule(
        re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
        'Must be in the format "email@example.com"',
    ),
}

INSURANCE_PRIORITY_KEYS = ("insurance-priority", "insurance-priority-2")

# address line 2 key -> address line 1 key it depends on
ADDRESS_LINE_2_FIELD_DEPENDENCIES: dict[str, str] = {
    "patient-street-address-2": "patient-street-address",
    "policy-holder-address-additional-line": "policy-holder-address",
    "policy-holder-address-additional-line-2": "policy-holder-address-2",
    "responsible-party-address-2": "responsible-party-address",
    "emergency-contact-address-2": "emergency-contact-address",
    "employer-address-2": "employer-address",
}


def _validate_dob(value: Any, _values: dict[str, Any]) -> bool | str:
    dob = parse_iso_datetime(value)
    if dob is None:
        return "Please enter a valid date"
    now = datetime.now(dob.tzinfo) if dob.tzinfo else datetime.now()
    if dob > now:
        return "Date of birth cannot be in the future"
    return True


def _validate_date(value: Any, _values: dict[str, Any]) -> bool | str:
    if parse_iso_datetime(value) is None:
        return "Please enter a valid date"
    return True


def _insurance_priority_validator(key: str) -> Validator:
    other_key = INSURANCE_PRIORITY_KEYS[1] if key == INSURANCE_PRIORITY_KEYS[0] else INSURANCE_PRIORITY_KEYS[0]

    def validate(value: Any, values: dict[str, Any]) -> bool | str:
        if values.get(other_key) == value:
            return f"Account may not have two {str(value).lower()} insurance plans"
        return True

    return validate


def _address_line_2_validator(line_1_key: str) -> Validator:
    def validate(value: Any, values: dict[str, Any]) -> bool | str:
        if value and not values.get(line_1_key):
            return "Address line 2 cannot be filled without address line 1"
        return True

    return validate


def generate_field_validation_rules(
    item: FieldConfig,
    form_values: dict[str, Any],
    required_form_fields: Iterable[str] | None = None,
) -> ValidationRules:
    """
    Build the validation rules for one field given the current form values.

    Only one custom validator is kept per field: a later by-key rule
    (insurance priority, address line 2) replaces an earlier date validator.
    """
    rules = ValidationRules()

    if item.is_display:
        return rules

    triggered = evaluate_field_triggers(item, form_values, item.enable_behavior)
    if item.key in (required_form_fields or ()) or triggered.required:
        rules.required = REQUIRED_FIELD_ERROR_MESSAGE

    if item.data_type in PATTERN_RULES:
        rules.pattern = PATTERN_RULES[item.data_type]

    if item.data_type == DataType.DOB:
        rules.validate = _validate_dob
    elif item.input_type == InputType.DATE:
        rules.validate = _validate_date

    if item.key in INSURANCE_PRIORITY_KEYS:
        rules.validate = _insurance_priority_validator(item.key)

    line_1_key = ADDRESS_LINE_2_FIELD_DEPENDENCIES.get(item.key)
    if line_1_key:
        rules.validate = _address_line_2_validator(line_1_key)

    return rules


def generate_validation_rules_for_section(
    items: dict[str, FieldConfig],
    form_values: dict[str, Any],
    required_form_fields: Iterable[str] | None = None,
) -> dict[str, ValidationRules]:
    """Rules for every field of one section's field map, keyed by field key."""
    required = list(required_form_fields or ())
    return {
        item.key: generate_field_validation_rules(item, form_values, required)
        for item in items.values()
    }
