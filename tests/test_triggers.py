"""Tests for trigger evaluation – pure functions, no app state required."""

import logging
from datetime import datetime, timezone

import pytest

from app.forms.models import FieldConfig, TriggeredEffects
from app.forms.triggers import evaluate_field_triggers, parse_iso_datetime, resolve_target_value


def _field(*triggers, enable_behavior="any", key="dependent-field"):
    return FieldConfig.from_dict(
        {
            "key": key,
            "type": "string",
            "label": "Dependent Field",
            "disabledDisplay": "hidden",
            "enableBehavior": enable_behavior,
            "triggers": list(triggers),
        }
    )


def _trigger(target="trigger-field", effects=("require",), operator="=", **answer):
    return {"targetFieldKey": target, "effects": list(effects), "operator": operator, **answer}


def test_no_triggers_is_permissive():
    result = evaluate_field_triggers(_field(), {})
    assert result == TriggeredEffects(required=False, enabled=True, substitute_text=None)


@pytest.mark.parametrize(
    "value, expected",
    [("some-value", True), ("", False), (None, False), (False, True), (0, True)],
)
def test_exists_true(value, expected):
    item = _field(_trigger(operator="exists", answerBoolean=True))
    assert evaluate_field_triggers(item, {"trigger-field": value}).required is expected


@pytest.mark.parametrize("value", ["", None])
def test_exists_false_is_negation(value):
    item = _field(_trigger(operator="exists", answerBoolean=False))
    assert evaluate_field_triggers(item, {"trigger-field": value}).required is True
    assert evaluate_field_triggers(item, {"trigger-field": "value"}).required is False


def test_exists_missing_key():
    present = _field(_trigger(operator="exists", answerBoolean=True))
    absent = _field(_trigger(operator="exists", answerBoolean=False))
    assert evaluate_field_triggers(present, {}).required is False
    assert evaluate_field_triggers(absent, {}).required is True


def test_equals_string():
    item = _field(_trigger(answerString="specific-value"))
    assert evaluate_field_triggers(item, {"trigger-field": "specific-value"}).required
    assert not evaluate_field_triggers(item, {"trigger-field": "other-value"}).required


def test_not_equals_string():
    item = _field(_trigger(operator="!=", answerString="exclude-value"))
    assert evaluate_field_triggers(item, {"trigger-field": "other-value"}).required
    assert not evaluate_field_triggers(item, {"trigger-field": "exclude-value"}).required
    # a missing value is "not equal" too
    assert evaluate_field_triggers(item, {}).required


def test_equals_boolean_is_strict():
    item = _field(_trigger(answerBoolean=True))
    assert evaluate_field_triggers(item, {"trigger-field": True}).required
    assert not evaluate_field_triggers(item, {"trigger-field": "true"}).required
    assert not evaluate_field_triggers(item, {"trigger-field": 1}).required


@pytest.mark.parametrize(
    "operator, value, expected",
    [
        (">", "2024-06-01", True),
        (">", "2023-01-01", False),
        (">", "2024-01-01", False),
        (">=", "2024-01-01", True),
        ("<", "2023-12-31", True),
        ("<", "2024-06-01", False),
        ("<=", "2024-01-01", True),
        ("<=", "2024-01-02T08:30:00", False),
    ],
)
def test_date_comparisons(operator, value, expected):
    item = _field(_trigger(target="date-field", operator=operator, answerDateTime="2024-01-01"))
    assert evaluate_field_triggers(item, {"date-field": value}).required is expected


@pytest.mark.parametrize("value", ["", None, "not-a-date", 20240601])
def test_date_comparison_never_raises(value):
    item = _field(_trigger(target="date-field", operator=">", answerDateTime="2024-01-01"))
    assert evaluate_field_triggers(item, {"date-field": value}).required is False


def test_date_comparison_requires_date_answer():
    item = _field(_trigger(target="date-field", operator=">", answerString="2024-01-01"))
    assert evaluate_field_triggers(item, {"date-field": "2025-01-01"}).required is False


def test_unknown_operator_logs_and_is_not_met(caplog):
    item = _field(_trigger(operator="contains", effects=("enable", "require"), answerString="x"))
    with caplog.at_level(logging.WARNING, logger="app.forms.triggers"):
        result = evaluate_field_triggers(item, {"trigger-field": "x"})
    assert result.required is False
    assert result.enabled is False
    assert "contains" in caplog.text


def test_enable_any():
    item = _field(
        _trigger(target="trigger-field-1", effects=("enable",), answerString="enable-value"),
        _trigger(target="trigger-field-2", effects=("enable",), answerString="other-enable-value"),
    )
    result = evaluate_field_triggers(
        item, {"trigger-field-1": "enable-value", "trigger-field-2": "wrong"}, "any"
    )
    assert result.enabled is True
    # a later failure does not revoke an earlier success
    result = evaluate_field_triggers(
        item, {"trigger-field-1": "wrong", "trigger-field-2": "other-enable-value"}, "any"
    )
    assert result.enabled is True
    result = evaluate_field_triggers(item, {"trigger-field-1": "wrong", "trigger-field-2": "wrong"}, "any")
    assert result.enabled is False


def test_enable_all():
    item = _field(
        _trigger(target="trigger-field-1", effects=("enable",), answerString="enable-value"),
        _trigger(target="trigger-field-2", effects=("enable",), answerString="other-enable-value"),
        enable_behavior="all",
    )
    result = evaluate_field_triggers(
        item,
        {"trigger-field-1": "enable-value", "trigger-field-2": "other-enable-value"},
        "all",
    )
    assert result.enabled is True
    for values in (
        {"trigger-field-1": "enable-value", "trigger-field-2": "wrong"},
        {"trigger-field-1": "wrong", "trigger-field-2": "other-enable-value"},
    ):
        assert evaluate_field_triggers(item, values, "all").enabled is False


def test_require_only_triggers_leave_enabled_unset():
    item = _field(_trigger(answerString="yes"))
    assert evaluate_field_triggers(item, {"trigger-field": "yes"}).enabled is None


def test_require_is_or_combined():
    item = _field(
        _trigger(target="a", answerString="yes"),
        _trigger(target="b", answerString="yes"),
    )
    assert evaluate_field_triggers(item, {"a": "yes", "b": "no"}).required is True
    assert evaluate_field_triggers(item, {"a": "no", "b": "no"}).required is False


def test_multiple_effects_share_one_condition():
    item = _field(_trigger(effects=("enable", "require"), answerString="special-value"))
    result = evaluate_field_triggers(item, {"trigger-field": "special-value"})
    assert (result.enabled, result.required) == (True, True)
    result = evaluate_field_triggers(item, {"trigger-field": "other-value"})
    assert (result.enabled, result.required) == (False, False)


def test_sub_text_last_met_wins():
    item = _field(
        _trigger(target="a", effects=("sub-text",), answerString="x", substituteText="first"),
        _trigger(target="b", effects=("sub-text",), answerString="x", substituteText="second"),
        _trigger(target="c", effects=("sub-text",), answerString="x", substituteText="third"),
    )
    assert evaluate_field_triggers(item, {"a": "x", "b": "x", "c": "no"}).substitute_text == "second"
    assert evaluate_field_triggers(item, {"a": "x", "b": "no", "c": "no"}).substitute_text == "first"
    assert evaluate_field_triggers(item, {}).substitute_text is None


def test_dotted_target_falls_back_to_field_key():
    item = _field(_trigger(target="patient-summary.reason-for-visit", answerString="Auto accident"))
    assert evaluate_field_triggers(item, {"reason-for-visit": "Auto accident"}).required
    # the exact dotted key wins when present
    values = {"patient-summary.reason-for-visit": "Cold", "reason-for-visit": "Auto accident"}
    assert not evaluate_field_triggers(item, values).required


def test_resolve_target_value():
    assert resolve_target_value("a.b.c", {"c": 1}) == 1
    assert resolve_target_value("plain", {"c": 1}) is None
    assert resolve_target_value("a.c", {"a.c": None, "c": 1}) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024", datetime(2024, 1, 1)),
        ("2024-06", datetime(2024, 6, 1)),
        ("2024-06-15", datetime(2024, 6, 15)),
        ("2024-06-15T10:30", datetime(2024, 6, 15, 10, 30)),
        ("2024-06-15T10:30:00Z", datetime(2024, 6, 15, 10, 30, tzinfo=timezone.utc)),
    ],
)
def test_iso_dates_accepted(value, expected):
    assert parse_iso_datetime(value) == expected


@pytest.mark.parametrize(
    "value", ["2024-01-01 10:00", "2024-13", "2024-02-30", "06/15/2024", "", None, 2024]
)
def test_non_iso_dates_rejected(value):
    assert parse_iso_datetime(value) is None


def test_partial_date_in_ordering_trigger():
    item = _field(_trigger(target="date-field", operator=">=", answerDateTime="2024-06"))
    assert evaluate_field_triggers(item, {"date-field": "2024-06-01"}).required is True
    assert evaluate_field_triggers(item, {"date-field": "2024"}).required is False
