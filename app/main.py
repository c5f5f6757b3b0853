"""
FastAPI application entrypoint.

Run locally:  uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI

from app.api.routes import router
from app.config import settings
from app.forms.loader import get_form_config

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s"
)

app = FastAPI(
    title="Patient Record Form Engine",
    description=(
        "Conditional field triggers, section visibility and dynamic "
        "validation for the patient intake / record form."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    # Fail fast on a malformed configuration file.
    get_form_config()
