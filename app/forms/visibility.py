"""
Section and field visibility.

Used by the whole-form resolver and directly by rendering code that needs
to know whether to draw a section at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from app.forms.models import (
    DisabledDisplay,
    FieldConfig,
    FieldKind,
    FieldMap,
    FormConfigError,
    FormSection,
)
from app.forms.triggers import evaluate_field_triggers


def resolve_link_id(section: FormSection, index: int | None = None) -> str | tuple[str, ...]:
    if index is not None and isinstance(section.link_id, tuple):
        if index >= len(section.link_id):
            raise FormConfigError(
                f"Section '{section.title}' has no linkId for repetition {index}"
            )
        return section.link_id[index]
    return section.link_id


def is_always_hidden(link_id: str | tuple[str, ...], hidden_sections: Iterable[str]) -> bool:
    hidden = set(hidden_sections)
    if isinstance(link_id, tuple):
        return any(member in hidden for member in link_id)
    return link_id in hidden


def section_as_item(section: FormSection, link_id: str | tuple[str, ...]) -> FieldConfig:
    """A display field standing in for the whole section during trigger evaluation."""
    key = link_id[0] if isinstance(link_id, tuple) else link_id
    return FieldConfig(
        key=key,
        kind=FieldKind.DISPLAY,
        label=section.title,
        disabled_display=DisabledDisplay.HIDDEN,
        triggers=section.triggers,
        enable_behavior=section.enable_behavior,
    )


def is_disabled_by_triggers(
    section: FormSection,
    form_values: dict[str, Any],
    link_id: str | tuple[str, ...],
) -> bool:
    if not section.triggers:
        return False
    effects = evaluate_field_triggers(
        section_as_item(section, link_id), form_values, section.enable_behavior
    )
    return effects.enabled is False


def is_section_hidden(
    section: FormSection,
    form_values: dict[str, Any] | None = None,
    index: int | None = None,
    hidden_sections: Iterable[str] = (),
) -> bool:
    """
    True when the section is in the static always-hidden list, or when its
    own triggers evaluate to explicitly disabled.

    Sections without triggers that aren't statically hidden are visible.
    """
    link_id = resolve_link_id(section, index)
    if is_always_hidden(link_id, hidden_sections):
        return True
    return is_disabled_by_triggers(section, form_values or {}, link_id)


def create_section_visibility_checker(
    form_values: dict[str, Any] | None = None,
    hidden_sections: Iterable[str] = (),
) -> Callable[..., bool]:
    """
    Bind a value snapshot once and query several sections against it::

        check = create_section_visibility_checker({"reason-for-visit": "Auto accident"})
        attorney_hidden = check(config.sections["attorneyInformation"])
    """
    values = dict(form_values or {})
    hidden = frozenset(hidden_sections)

    def check(section: FormSection, index: int | None = None) -> bool:
        return is_section_hidden(section, values, index, hidden)

    return check


def section_items(section: FormSection, index: int | None = None) -> FieldMap:
    """The field map for one repetition; single sections ignore ``index``."""
    items = section.items
    if isinstance(items, tuple):
        if index is None or not 0 <= index < len(items):
            raise FormConfigError(
                "Form section items could not be validated. Did you forget to pass index?"
            )
        return items[index]
    return items


def is_field_hidden(
    field_key: str,
    section: FormSection,
    form_values: dict[str, Any] | None = None,
    index: int | None = None,
) -> bool:
    """
    True when the field is statically hidden in its section, missing from
    it, or switched off by its own triggers while configured to hide when
    disabled. Triggers are only consulted when values are supplied.
    """
    if field_key in section.hidden_fields:
        return True

    if section.is_array and index is None:
        groups = section.item_groups()
    else:
        groups = (section_items(section, index),)

    item = next(
        (i for group in groups for i in group.values() if i.key == field_key), None
    )
    if item is None:
        return True

    hides_when_disabled = item.is_display or item.disabled_display == DisabledDisplay.HIDDEN
    if hides_when_disabled and item.triggers and form_values:
        effects = evaluate_field_triggers(item, form_values, item.enable_behavior)
        return effects.enabled is False
    return False


@dataclass
class SectionDetails:
    title: str
    link_id: str
    is_hidden: bool
    items: FieldMap
    hidden_fields: list[str] = field(default_factory=list)
    required_fields: list[str] = field(default_factory=list)


def get_section_details(
    section: FormSection,
    form_values: dict[str, Any] | None = None,
    index: int | None = None,
    hidden_sections: Iterable[str] = (),
) -> SectionDetails:
    """
    Everything a section-scoped component needs to render one section.

    Raises FormConfigError when an array section is used without an index.
    """
    link_id = resolve_link_id(section, index)
    if not isinstance(link_id, str):
        raise FormConfigError(
            "Form section linkId must be a string when used for a single section. "
            "Did you forget to pass index?"
        )
    return SectionDetails(
        title=section.title,
        link_id=link_id,
        is_hidden=is_section_hidden(section, form_values, index, hidden_sections),
        items=section_items(section, index),
        hidden_fields=list(section.hidden_fields),
        required_fields=section.required_fields_for(index),
    )
