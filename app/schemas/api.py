"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Whole-form validation
# ---------------------------------------------------------------------------

class FormValidationRequest(BaseModel):
    """Current form values plus how many repetitions of each array section are shown."""
    model_config = ConfigDict(populate_by_name=True)

    values: dict[str, Any] = Field(default_factory=dict)
    rendered_section_counts: dict[str, int] | None = Field(
        default=None, alias="renderedSectionCounts"
    )


class FieldErrorResponse(BaseModel):
    type: str
    message: str


class FormValidationResult(BaseModel):
    values: dict[str, Any]
    errors: dict[str, FieldErrorResponse] = {}
    valid: bool


# ---------------------------------------------------------------------------
# Section queries
# ---------------------------------------------------------------------------

class SectionQuery(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)
    index: int | None = Field(default=None, ge=0)


class SectionVisibility(BaseModel):
    section: str
    index: int | None = None
    hidden: bool


class SectionSummary(BaseModel):
    key: str
    title: str
    link_id: str | list[str]
    is_array: bool
    repetitions: int


class PatternResponse(BaseModel):
    value: str
    message: str


class FieldRulesResponse(BaseModel):
    required: str | None = None
    pattern: PatternResponse | None = None
    has_custom_validator: bool = False
    enabled: bool = True
    substitute_text: str | None = None


class SectionRules(BaseModel):
    section: str
    link_id: str
    hidden: bool
    fields: dict[str, FieldRulesResponse]


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    form_sections: int = 0
