import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_FORM_CONFIG_PATH = Path(__file__).parent / "data" / "patient_record_config.json"


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    FORM_CONFIG_PATH: str = os.getenv("FORM_CONFIG_PATH", str(DEFAULT_FORM_CONFIG_PATH))
    FORM_CONFIG_OVERRIDE_PATH: str = os.getenv("FORM_CONFIG_OVERRIDE_PATH", "")


settings = Settings()
