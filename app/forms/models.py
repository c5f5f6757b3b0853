"""
Typed model of the patient record form configuration.

Sections hold fields, fields and sections both carry triggers. Everything
here is frozen: a FormConfig is built once from JSON and then only read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


REQUIRED_FIELD_ERROR_MESSAGE = "This field is required"


class FormConfigError(ValueError):
    """The form configuration is structurally invalid or used with the wrong shape."""


class FieldKind(str, Enum):
    INPUT = "input"
    DISPLAY = "display"
    GROUP = "group"


class InputType(str, Enum):
    """Control type of an input field. Only DATE changes validation."""

    STRING = "string"
    DATE = "date"
    CHOICE = "choice"
    BOOLEAN = "boolean"
    REFERENCE = "reference"


class DataType(str, Enum):
    ZIP = "ZIP"
    PHONE_NUMBER = "Phone Number"
    SSN = "SSN"
    EMAIL = "Email"
    DOB = "DOB"


class DisabledDisplay(str, Enum):
    HIDDEN = "hidden"
    DISABLED = "disabled"


class EnableBehavior(str, Enum):
    ANY = "any"
    ALL = "all"


class Effect(str, Enum):
    ENABLE = "enable"
    REQUIRE = "require"
    SUB_TEXT = "sub-text"


class Operator(str, Enum):
    EXISTS = "exists"
    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="


def _parse_operator(raw: str) -> Operator | str:
    # Unrecognised operators are kept verbatim; the evaluator warns and
    # treats them as never met instead of rejecting the whole config.
    try:
        return Operator(raw)
    except ValueError:
        return raw


@dataclass(frozen=True)
class Trigger:
    """One conditional rule: compare another field's value, apply effects."""

    target_field_key: str
    effects: tuple[Effect, ...]
    operator: Operator | str
    answer_boolean: bool | None = None
    answer_string: str | None = None
    answer_date_time: str | None = None
    substitute_text: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Trigger:
        return cls(
            target_field_key=data["targetFieldKey"],
            effects=tuple(Effect(e) for e in data["effects"]),
            operator=_parse_operator(data["operator"]),
            answer_boolean=data.get("answerBoolean"),
            answer_string=data.get("answerString"),
            answer_date_time=data.get("answerDateTime"),
            substitute_text=data.get("substituteText"),
        )


@dataclass(frozen=True)
class FieldConfig:
    key: str
    kind: FieldKind = FieldKind.INPUT
    input_type: InputType = InputType.STRING
    label: str = ""
    data_type: DataType | None = None
    disabled_display: DisabledDisplay = DisabledDisplay.HIDDEN
    triggers: tuple[Trigger, ...] = ()
    enable_behavior: EnableBehavior = EnableBehavior.ANY

    @property
    def is_display(self) -> bool:
        return self.kind == FieldKind.DISPLAY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldConfig:
        # "type" is either a kind (display/group) or an input control type.
        raw_type = data.get("type", "string")
        if raw_type in (FieldKind.DISPLAY.value, FieldKind.GROUP.value):
            kind, input_type = FieldKind(raw_type), InputType.STRING
        else:
            kind, input_type = FieldKind.INPUT, InputType(raw_type)
        data_type = data.get("dataType")
        return cls(
            key=data["key"],
            kind=kind,
            input_type=input_type,
            label=data.get("label", data.get("text", "")),
            data_type=DataType(data_type) if data_type else None,
            disabled_display=DisabledDisplay(data.get("disabledDisplay", "hidden")),
            triggers=tuple(Trigger.from_dict(t) for t in data.get("triggers", [])),
            enable_behavior=EnableBehavior(data.get("enableBehavior", "any")),
        )


FieldMap = dict[str, FieldConfig]


@dataclass(frozen=True)
class FormSection:
    """
    A titled group of fields.

    Array sections repeat (primary / secondary insurance): ``link_id`` is a
    tuple of ids and ``items`` a tuple of field maps, one per repetition.
    """

    title: str
    link_id: str | tuple[str, ...]
    items: FieldMap | tuple[FieldMap, ...]
    hidden_fields: tuple[str, ...] = ()
    required_fields: tuple[str, ...] | tuple[tuple[str, ...], ...] = ()
    triggers: tuple[Trigger, ...] = ()
    enable_behavior: EnableBehavior = EnableBehavior.ANY

    @property
    def is_array(self) -> bool:
        return isinstance(self.items, tuple)

    @property
    def link_ids(self) -> tuple[str, ...]:
        return self.link_id if isinstance(self.link_id, tuple) else (self.link_id,)

    def item_groups(self) -> tuple[FieldMap, ...]:
        """Field maps in repetition order; a single section has one."""
        return self.items if isinstance(self.items, tuple) else (self.items,)

    def required_fields_for(self, index: int | None = None) -> list[str]:
        if self.required_fields and isinstance(self.required_fields[0], tuple):
            if index is None or index >= len(self.required_fields):
                return []
            return list(self.required_fields[index])
        return list(self.required_fields)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormSection:
        link_id = data["linkId"]
        items = data["items"]
        if isinstance(items, list):
            parsed_items: FieldMap | tuple[FieldMap, ...] = tuple(
                _parse_field_map(group) for group in items
            )
        else:
            parsed_items = _parse_field_map(items)
        required = data.get("requiredFields", [])
        if required and isinstance(required[0], list):
            required_fields: Any = tuple(tuple(group) for group in required)
        else:
            required_fields = tuple(required)
        return cls(
            title=data.get("title", ""),
            link_id=tuple(link_id) if isinstance(link_id, list) else link_id,
            items=parsed_items,
            hidden_fields=tuple(data.get("hiddenFields", [])),
            required_fields=required_fields,
            triggers=tuple(Trigger.from_dict(t) for t in data.get("triggers", [])),
            enable_behavior=EnableBehavior(data.get("enableBehavior", "any")),
        )


def _parse_field_map(items: dict[str, Any]) -> FieldMap:
    return {name: FieldConfig.from_dict(item) for name, item in items.items()}


@dataclass(frozen=True)
class FormConfig:
    sections: dict[str, FormSection]
    hidden_form_sections: frozenset[str] = frozenset()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormConfig:
        return cls(
            sections={
                key: FormSection.from_dict(section)
                for key, section in data.get("FormFields", {}).items()
            },
            hidden_form_sections=frozenset(data.get("hiddenFormSections", [])),
        )


@dataclass
class TriggeredEffects:
    """
    Outcome of evaluating a trigger list.

    ``enabled`` is None when no enable trigger was present; callers treat
    that the same as True.
    """

    required: bool = False
    enabled: bool | None = None
    substitute_text: str | None = None


@dataclass(frozen=True)
class PatternRule:
    value: re.Pattern[str]
    message: str


# (value, all form values) -> True on success, a message or False on failure
Validator = Callable[[Any, dict[str, Any]], "bool | str"]


@dataclass
class ValidationRules:
    required: str | None = None
    pattern: PatternRule | None = None
    validate: Validator | None = None

    def is_empty(self) -> bool:
        return self.required is None and self.pattern is None and self.validate is None


def is_blank(value: Any) -> bool:
    return value is None or value == ""
