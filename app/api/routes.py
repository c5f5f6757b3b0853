"""
FastAPI routes for the patient record form engine.

- Whole-form validation through the dynamic resolver
- Section visibility and per-section rule queries for section-scoped UIs
- The form configuration is injected with Depends so tests can swap it
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.config import settings
from app.forms.loader import get_form_config
from app.forms.models import FormConfig, FormConfigError, FormSection
from app.forms.resolver import create_dynamic_validation_resolver
from app.forms.rules import generate_validation_rules_for_section
from app.forms.triggers import evaluate_field_triggers
from app.forms.visibility import get_section_details, is_section_hidden
from app.schemas.api import (
    FieldRulesResponse,
    FormValidationRequest,
    FormValidationResult,
    HealthResponse,
    PatternResponse,
    SectionQuery,
    SectionRules,
    SectionSummary,
    SectionVisibility,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_section(form_config: FormConfig, section_key: str) -> FormSection:
    section = form_config.sections.get(section_key)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Unknown form section '{section_key}'")
    return section


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check(form_config: FormConfig = Depends(get_form_config)):
    """Basic health endpoint – reports how many form sections are configured."""
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        form_sections=len(form_config.sections),
    )


# ---------------------------------------------------------------------------
# Form configuration
# ---------------------------------------------------------------------------

@router.get("/forms/patient-record/sections", response_model=list[SectionSummary])
def list_sections(form_config: FormConfig = Depends(get_form_config)):
    return [
        SectionSummary(
            key=key,
            title=section.title,
            link_id=list(section.link_id) if section.is_array else section.link_id,
            is_array=section.is_array,
            repetitions=len(section.item_groups()),
        )
        for key, section in form_config.sections.items()
    ]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@router.post("/forms/patient-record/validate", response_model=FormValidationResult)
async def validate_patient_record(
    request: FormValidationRequest,
    form_config: FormConfig = Depends(get_form_config),
):
    """Run the whole-form resolver against the submitted values."""
    resolver = create_dynamic_validation_resolver(
        form_config, rendered_section_counts=request.rendered_section_counts
    )
    result = await resolver(request.values)
    if result["errors"]:
        logger.info("Patient record failed validation on %d field(s)", len(result["errors"]))
    return FormValidationResult(
        values=result["values"],
        errors=result["errors"],
        valid=not result["errors"],
    )


@router.post(
    "/forms/patient-record/sections/{section_key}/visibility",
    response_model=SectionVisibility,
)
def section_visibility(
    section_key: str,
    query: SectionQuery,
    form_config: FormConfig = Depends(get_form_config),
):
    section = _get_section(form_config, section_key)
    try:
        hidden = is_section_hidden(
            section, query.values, query.index, form_config.hidden_form_sections
        )
    except FormConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SectionVisibility(section=section_key, index=query.index, hidden=hidden)


@router.post(
    "/forms/patient-record/sections/{section_key}/rules",
    response_model=SectionRules,
)
def section_rules(
    section_key: str,
    query: SectionQuery,
    form_config: FormConfig = Depends(get_form_config),
):
    """
    Per-field rules for one section (or one repetition of an array section),
    along with each field's trigger-driven enabled state and label override.
    """
    section = _get_section(form_config, section_key)
    try:
        details = get_section_details(
            section, query.values, query.index, form_config.hidden_form_sections
        )
    except FormConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    rules = generate_validation_rules_for_section(
        details.items, query.values, details.required_fields
    )
    fields: dict[str, FieldRulesResponse] = {}
    for item in details.items.values():
        field_rules = rules[item.key]
        effects = evaluate_field_triggers(item, query.values, item.enable_behavior)
        fields[item.key] = FieldRulesResponse(
            required=field_rules.required,
            pattern=PatternResponse(
                value=field_rules.pattern.value.pattern,
                message=field_rules.pattern.message,
            )
            if field_rules.pattern
            else None,
            has_custom_validator=field_rules.validate is not None,
            enabled=effects.enabled is not False,
            substitute_text=effects.substitute_text,
        )

    return SectionRules(
        section=section_key,
        link_id=details.link_id,
        hidden=details.is_hidden,
        fields=fields,
    )
