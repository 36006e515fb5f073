"""Application initialization.

Loads the .env file into the process environment and configures logging
before the application object is built.
"""

from dotenv import load_dotenv

from turnstile.core.config.settings import settings
from turnstile.core.logging import configure_logging


def initialize_application() -> None:
    """Initialize the application with all necessary setup tasks."""
    load_dotenv(override=False)
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
