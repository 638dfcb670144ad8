"""Settings for the pipeline console backend."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the pipeline console backend.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) reads
    configuration values from environment variables and, for local development, from a .env file.

    Environment variable names are treated case-insensitively, but the canonical
    names used in this project are lowercase (orchestrator_base_url, poll_interval_ms, ...).
    """

    # Orchestrator backend
    orchestrator_base_url: str = "http://localhost:8002"
    """Base URL of the orchestration backend that owns pipelines, locks and flow runs."""

    orchestrator_api_token: Optional[str] = None
    """Bearer token sent with every orchestrator request (optional for local backends)."""

    orchestrator_org_slug: Optional[str] = None
    """Organization slug sent as the x-dalgo-org header when set."""

    request_timeout_seconds: float = 10.0
    """Timeout for a single orchestrator request."""

    # Polling
    poll_interval_ms: int = 3000
    """Interval between pipeline list re-fetches while any pipeline is locked or optimistically triggered."""

    enable_background_polling: bool = True
    """Start the polling loop automatically after each load/trigger when locks are active."""

    # Schedule display
    display_timezone: str = "local"
    """Timezone used to render UTC cron schedules ("local", "UTC", IANA name or fixed offset like "+05:30")."""

    # Logging
    log_level: str = "INFO"
    """Minimum level for the stdout sink."""

    log_json: bool = False
    """Emit stdout logs as serialized JSON records instead of the colored format."""

    log_file: Optional[str] = None
    """Optional path for a rotating file sink."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,
    )
