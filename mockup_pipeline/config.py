import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# Provider API - loaded from .env
PRINTFUL_API_KEY = os.getenv("PRINTFUL_API_KEY")
PRINTFUL_API_URL = os.getenv("PRINTFUL_API_URL", "https://api.printful.com")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

# Placeholder color key
PLACEHOLDER_HUE = float(os.getenv("PLACEHOLDER_HUE", "300"))  # magenta
HUE_TOLERANCE = float(os.getenv("HUE_TOLERANCE", "15"))
MIN_SATURATION = float(os.getenv("MIN_SATURATION", "0.4"))
MIN_LIGHTNESS = float(os.getenv("MIN_LIGHTNESS", "0.15"))

# Provider task polling
MOCKUP_POLL_INTERVAL = float(os.getenv("MOCKUP_POLL_INTERVAL", "2.0"))
MOCKUP_MAX_ATTEMPTS = int(os.getenv("MOCKUP_MAX_ATTEMPTS", "30"))
MOCKUP_FORMAT = os.getenv("MOCKUP_FORMAT", "jpg")

# Catalog store file used by the local worker
CATALOG_PATH = os.getenv("CATALOG_PATH", "catalog.json")


@dataclass(frozen=True)
class PollingConfig:
    """Provider task polling budget."""
    poll_interval: float = MOCKUP_POLL_INTERVAL  # seconds between polls
    max_attempts: int = MOCKUP_MAX_ATTEMPTS
    format: str = MOCKUP_FORMAT


def default_polling() -> PollingConfig:
    """Polling config built from the environment."""
    return PollingConfig()
