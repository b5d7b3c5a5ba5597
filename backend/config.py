import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_AIRPORTS_PATH = Path(__file__).parent.parent / "data" / "airports.csv"
AMADEUS_HOSTNAMES = ("production", "test")


class ConfigurationError(ValueError):
    """Raised when the process environment cannot serve searches."""


class Settings(BaseModel):
    """Runtime configuration for the search backend."""

    amadeus_api_key: str = Field(repr=False, description="Amadeus client id")
    amadeus_api_secret: str = Field(repr=False, description="Amadeus client secret")
    amadeus_hostname: str = Field("production", description="'production' or 'test'")
    max_results: int = Field(5, description="Maximum offers requested per search")
    currency: str = Field("EUR", description="Currency code sent to the provider")
    adults: int = Field(1, description="Passenger count sent to the provider")
    search_timeout: float = Field(
        20.0, description="Seconds to wait for the provider before giving up"
    )
    airports_path: Path = Field(DEFAULT_AIRPORTS_PATH, description="City/IATA CSV")
    log_level: str = Field("INFO", description="Root log level")


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def server_address() -> tuple[str, int]:
    """Host and port the backend API listens on."""
    host = os.getenv("FLIGHT_FINDER_HOST", "0.0.0.0").strip() or "0.0.0.0"
    port = _env_number("FLIGHT_FINDER_PORT", "8000", int)
    if port > 65535:
        raise ConfigurationError(f"FLIGHT_FINDER_PORT is out of range, got {port}")
    return host, port


def load_settings() -> Settings:
    """Build settings from the environment, failing fast on missing credentials."""
    api_key = os.getenv("AMADEUS_API_KEY", "").strip()
    api_secret = os.getenv("AMADEUS_API_SECRET", "").strip()

    missing = [
        name
        for name, value in (
            ("AMADEUS_API_KEY", api_key),
            ("AMADEUS_API_SECRET", api_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    hostname = os.getenv("AMADEUS_HOSTNAME", "production").strip().lower()
    if hostname not in AMADEUS_HOSTNAMES:
        raise ConfigurationError(
            f"AMADEUS_HOSTNAME must be one of {', '.join(AMADEUS_HOSTNAMES)}, got {hostname!r}"
        )

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"LOG_LEVEL is not a logging level: {log_level!r}")

    settings = Settings(
        amadeus_api_key=api_key,
        amadeus_api_secret=api_secret,
        amadeus_hostname=hostname,
        max_results=_env_number("FLIGHT_SEARCH_MAX_RESULTS", "5", int),
        currency=os.getenv("FLIGHT_SEARCH_CURRENCY", "EUR").strip().upper(),
        adults=_env_number("FLIGHT_SEARCH_ADULTS", "1", int),
        search_timeout=_env_number("FLIGHT_SEARCH_TIMEOUT", "20", float),
        airports_path=Path(os.getenv("AIRPORTS_PATH", str(DEFAULT_AIRPORTS_PATH))),
        log_level=log_level,
    )
    logger.info(
        f"Loaded settings: hostname={settings.amadeus_hostname}, "
        f"max_results={settings.max_results}, currency={settings.currency}, "
        f"timeout={settings.search_timeout}s"
    )
    return settings
