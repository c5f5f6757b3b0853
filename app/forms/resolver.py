"""
Whole-form validation resolver.

Turns a flat map of submitted values into an error map, honouring field and
section triggers, the static always-hidden list and how many repetitions of
each array section are actually on screen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from app.forms.models import (
    DisabledDisplay,
    FieldConfig,
    FieldMap,
    FormConfig,
    FormSection,
    ValidationRules,
    is_blank,
)
from app.forms.rules import generate_field_validation_rules
from app.forms.triggers import evaluate_field_triggers
from app.forms.visibility import is_always_hidden, is_section_hidden

logger = logging.getLogger(__name__)

FieldError = dict[str, str]
ResolverResult = dict[str, Any]
ValidationResolver = Callable[[dict[str, Any]], Awaitable[ResolverResult]]


@dataclass(frozen=True)
class FieldLocation:
    section: FormSection
    index: int
    items: FieldMap


def flatten_fields(form_config: FormConfig) -> dict[str, FieldConfig]:
    """Every field in the form keyed by its (globally unique) key."""
    fields: dict[str, FieldConfig] = {}
    for section in form_config.sections.values():
        for group in section.item_groups():
            for item in group.values():
                fields[item.key] = item
    return fields


def locate_field(form_config: FormConfig, field_key: str) -> FieldLocation | None:
    """First section (and repetition) whose field map holds ``field_key``."""
    for section in form_config.sections.values():
        for index, group in enumerate(section.item_groups()):
            if any(item.key == field_key for item in group.values()):
                return FieldLocation(section=section, index=index, items=group)
    return None


def is_hidden_when_disabled(item: FieldConfig, form_values: dict[str, Any]) -> bool:
    effects = evaluate_field_triggers(item, form_values, item.enable_behavior)
    return effects.enabled is False and item.disabled_display == DisabledDisplay.HIDDEN


def is_beyond_rendered_count(
    section: FormSection, index: int, rendered_section_counts: dict[str, int]
) -> bool:
    # The first of the section's linkIds present in the map decides.
    for link_id in section.link_ids:
        if link_id in rendered_section_counts:
            return index >= rendered_section_counts[link_id]
    return False


def is_location_hidden(
    location: FieldLocation,
    form_values: dict[str, Any],
    hidden_sections: frozenset[str],
) -> bool:
    section = location.section
    # Any always-hidden repetition hides every repetition of the section.
    if is_always_hidden(section.link_ids, hidden_sections):
        return True
    index = location.index if section.is_array else None
    if is_section_hidden(section, form_values, index, hidden_sections):
        return True
    # A section whose every input is hidden by its own triggers is hidden too.
    return bool(location.items) and all(
        item.is_display or is_hidden_when_disabled(item, form_values)
        for item in location.items.values()
    )


def apply_rules(rules: ValidationRules, value: Any, values: dict[str, Any]) -> FieldError | None:
    """Run rules in order (required, pattern, validate); first failure wins."""
    if rules.required and is_blank(value):
        return {"type": "required", "message": rules.required}

    if rules.pattern and value and isinstance(value, str):
        if not rules.pattern.value.fullmatch(value):
            return {"type": "pattern", "message": rules.pattern.message or "Invalid format"}

    if rules.validate and not is_blank(value):
        result = rules.validate(value, values)
        if isinstance(result, str):
            return {"type": "validate", "message": result}
        if result is False:
            return {"type": "validate", "message": "Validation failed"}

    return None


def resolve_form(
    form_config: FormConfig,
    values: dict[str, Any],
    rendered_section_counts: dict[str, int] | None = None,
) -> ResolverResult:
    """Synchronous body of the resolver: validate ``values`` against the whole form."""
    counts = rendered_section_counts or {}
    errors: dict[str, FieldError] = {}

    for field_key, item in flatten_fields(form_config).items():
        if item.is_display:
            continue

        if is_hidden_when_disabled(item, values):
            continue

        location = locate_field(form_config, field_key)
        if location is None:
            continue

        if is_beyond_rendered_count(location.section, location.index, counts):
            continue

        if is_location_hidden(location, values, form_config.hidden_form_sections):
            continue

        required_fields = location.section.required_fields_for(location.index)
        rules = generate_field_validation_rules(item, values, required_fields)
        error = apply_rules(rules, values.get(field_key), values)
        if error is not None:
            errors[field_key] = error

    logger.debug("Form resolved with %d error(s)", len(errors))
    return {"values": values, "errors": errors}


def create_dynamic_validation_resolver(
    form_config: FormConfig,
    rendered_section_counts: dict[str, int] | None = None,
) -> ValidationResolver:
    """
    Build an async resolver ``(values) -> {"values", "errors"}`` for a
    form-state library.

    ``rendered_section_counts`` maps a section linkId to how many of its
    repetitions are rendered; sections not in the map are fully rendered.
    A single (non-array) section counts as repetition 0, so a count of 0
    for its linkId skips it as well.
    """
    counts = dict(rendered_section_counts or {})

    async def resolver(values: dict[str, Any]) -> ResolverResult:
        return resolve_form(form_config, values, counts)

    return resolver
