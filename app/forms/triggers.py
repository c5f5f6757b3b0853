"""
Trigger evaluation for patient record fields and sections.

A trigger compares one other field's current value against an answer and,
when the condition holds, applies its effects (enable / require / sub-text)
to the field that owns it.
"""

from __future__ import annotations

import logging
import operator as op
import re
from datetime import datetime, timezone
from typing import Any, Callable

from app.forms.models import (
    Effect,
    EnableBehavior,
    FieldConfig,
    Operator,
    Trigger,
    TriggeredEffects,
    is_blank,
)

logger = logging.getLogger(__name__)

_DATE_COMPARATORS: dict[Operator, Callable[[datetime, datetime], bool]] = {
    Operator.GT: op.gt,
    Operator.LT: op.lt,
    Operator.GTE: op.ge,
    Operator.LTE: op.le,
}

_PARTIAL_DATE = re.compile(r"(?P<year>\d{4})(?:-(?P<month>\d{2}))?")


def parse_iso_datetime(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 date or datetime string; None if it isn't one.

    Accepts ``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD`` and ``YYYY-MM-DDThh:mm[:ss...]``
    with an optional offset or ``Z``. A space in place of ``T`` is rejected.
    """
    if not isinstance(value, str) or not value or " " in value:
        return None
    partial = _PARTIAL_DATE.fullmatch(value)
    try:
        if partial:
            return datetime(int(partial["year"]), int(partial["month"] or 1), 1)
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _comparable(left: datetime, right: datetime) -> tuple[datetime, datetime]:
    # Naive values are read as UTC when compared against aware ones.
    if (left.tzinfo is None) != (right.tzinfo is None):
        if left.tzinfo is None:
            left = left.replace(tzinfo=timezone.utc)
        else:
            right = right.replace(tzinfo=timezone.utc)
    return left, right


def _strict_equals(left: Any, right: Any) -> bool:
    # Form values are untyped; True must not equal "true" or 1.
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


def resolve_target_value(target_key: str, form_values: dict[str, Any]) -> Any:
    """
    Look up a trigger's target value.

    Exact key first; for dotted keys ("patient-summary.reason-for-visit")
    fall back to the part after the last dot.
    """
    if target_key in form_values:
        return form_values[target_key]
    if "." in target_key:
        return form_values.get(target_key.rsplit(".", 1)[-1])
    return None


def _expected_answer(trigger: Trigger) -> tuple[bool, Any]:
    if trigger.answer_boolean is not None:
        return True, trigger.answer_boolean
    if trigger.answer_string is not None:
        return True, trigger.answer_string
    if trigger.answer_date_time is not None:
        return True, trigger.answer_date_time
    return False, None


def is_condition_met(trigger: Trigger, current_value: Any) -> bool:
    operator = trigger.operator

    if operator == Operator.EXISTS:
        if trigger.answer_boolean is True:
            return not is_blank(current_value)
        if trigger.answer_boolean is False:
            return is_blank(current_value)
        return False

    if operator in (Operator.EQ, Operator.NE):
        has_answer, expected = _expected_answer(trigger)
        if not has_answer:
            return False
        equal = _strict_equals(current_value, expected)
        return equal if operator == Operator.EQ else not equal

    if operator in _DATE_COMPARATORS:
        if trigger.answer_date_time is None or is_blank(current_value):
            return False
        current_date = parse_iso_datetime(current_value)
        answer_date = parse_iso_datetime(trigger.answer_date_time)
        if current_date is None or answer_date is None:
            return False
        return _DATE_COMPARATORS[operator](*_comparable(current_date, answer_date))

    logger.warning("Operator %s not implemented in trigger processing", operator)
    return False


def evaluate_field_triggers(
    item: FieldConfig,
    form_values: dict[str, Any],
    enable_behavior: EnableBehavior | str = EnableBehavior.ANY,
) -> TriggeredEffects:
    """
    Evaluate every trigger on ``item`` against the current form values.

    Each (trigger, effect) pair is one unit, reduced left to right:
    enable combines per ``enable_behavior``, require is OR-ed, and the last
    met sub-text wins.
    """
    if not item.triggers:
        return TriggeredEffects(required=False, enabled=True, substitute_text=None)

    behavior = EnableBehavior(enable_behavior or EnableBehavior.ANY)
    result = TriggeredEffects()

    units = [(trigger, effect) for trigger in item.triggers for effect in trigger.effects]
    for trigger, effect in units:
        current_value = resolve_target_value(trigger.target_field_key, form_values)
        condition_met = is_condition_met(trigger, current_value)

        if effect == Effect.ENABLE:
            if condition_met:
                if result.enabled is None or behavior == EnableBehavior.ANY:
                    result.enabled = True
                # under "all" an earlier failure sticks
            elif result.enabled is None or behavior == EnableBehavior.ALL:
                result.enabled = False
        elif effect == Effect.REQUIRE:
            if condition_met:
                result.required = True
        elif effect == Effect.SUB_TEXT:
            if condition_met:
                result.substitute_text = trigger.substitute_text

    return result
