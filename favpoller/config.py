from typing import Annotated, Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Numbers are parsed when possible; anything else is kept verbatim and left to
# resolve_interval() to reject.
IntervalMs = Annotated[float | str | None, Field(union_mode="left_to_right")]


class ApiSettings(BaseModel):
    base_url: str = "http://localhost:8080"
    email: str = ""
    password: str = ""

    # Scheduling (milliseconds, floored by MINIMAL_*_INTERVAL_MS)
    authentication_interval_ms: IntervalMs = None
    polling_interval_ms: IntervalMs = None

    prevent_overlapping_polls: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # App
    app_name: str = "favpoller"
    app_env: str = "development"

    # Initial value of the enable signal
    polling_enabled: bool = True

    # Remote API
    api: ApiSettings = ApiSettings()

    # Sentry (optional — only set in staging/production)
    sentry_dsn: str = ""

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def log_level(self) -> str:
        return "INFO" if self.is_production else "DEBUG"

    def get(self, path: str) -> Any:
        """Look up a dotted path such as ``"api.polling_interval_ms"``.

        Returns None when any segment of the path is missing.
        """
        node: Any = self
        for part in path.split("."):
            if isinstance(node, BaseModel):
                node = getattr(node, part, None)
            elif isinstance(node, dict):
                node = node.get(part)
            else:
                return None
            if node is None:
                return None
        return node


settings = Settings()

# ---------------------------------------------------------------------------
# Application constants (not env-configurable — change in code)
# ---------------------------------------------------------------------------

# Eligibility window
TIME_ZONE = "America/Toronto"
RUN_WINDOW_START_HOUR = 9  # 9 AM, inclusive
RUN_WINDOW_END_HOUR = 22  # 10 PM, exclusive

# Jitter before each poll (milliseconds)
JITTER_MAX_MS = 30_000

# Additional attempts after the first failed API call
RETRY_COUNT = 2

# Interval floors (milliseconds)
MINIMAL_POLLING_INTERVAL_MS = 15_000
MINIMAL_AUTHENTICATION_INTERVAL_MS = 3_600_000

# HTTP timeouts (seconds)
HTTP_TIMEOUT = 15.0
