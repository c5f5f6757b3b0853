"""
Loading of the patient record form configuration.

The default configuration ships as JSON; a deployment can layer an
override file on top. The merged document is schema-checked and turned
into an immutable FormConfig once per process.
"""

from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from app.config import settings
from app.forms.models import FormConfig, FormConfigError
from app.schemas.form_config import FORM_CONFIG_SCHEMA
from app.services.validation import validate_against_schema

logger = logging.getLogger(__name__)


def merge_config_objects(base: Any, override: Any) -> Any:
    """
    Deep-merge ``override`` onto ``base`` without mutating either.

    Objects merge key by key; an array in the override replaces the base
    array outright rather than being merged element-wise.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if key in merged and value is not None:
                merged[key] = merge_config_objects(merged[key], value)
            elif value is not None or key not in merged:
                merged[key] = copy.deepcopy(value)
        return merged
    if override is None:
        return copy.deepcopy(base)
    return copy.deepcopy(override)


def read_json(path: str | Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def build_form_config(
    data: dict[str, Any], override: dict[str, Any] | None = None
) -> FormConfig:
    """Merge, validate and freeze a raw configuration document."""
    merged = merge_config_objects(data, override) if override else data
    errors = validate_against_schema(merged, FORM_CONFIG_SCHEMA)
    if errors:
        raise FormConfigError("Invalid form configuration: " + "; ".join(errors))
    return FormConfig.from_dict(merged)


def load_form_config(
    path: str | Path, override_path: str | Path | None = None
) -> FormConfig:
    override = read_json(override_path) if override_path else None
    config = build_form_config(read_json(path), override)
    logger.info(
        "Loaded form config from %s%s: %d sections, %d always hidden",
        path,
        f" (override {override_path})" if override_path else "",
        len(config.sections),
        len(config.hidden_form_sections),
    )
    return config


@lru_cache(maxsize=1)
def get_form_config() -> FormConfig:
    """Process-wide form configuration; also usable as a FastAPI dependency."""
    return load_form_config(
        settings.FORM_CONFIG_PATH, settings.FORM_CONFIG_OVERRIDE_PATH or None
    )
