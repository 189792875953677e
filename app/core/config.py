from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # SQLite keeps all state on the user's device by default.
    DATABASE_URL: str = "sqlite:///./chains.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # IANA zone name used to derive local day keys ("Europe/Madrid").
    # Empty means the host's local zone.
    TIMEZONE: str = ""

    CALENDAR_DEFAULT_WINDOW: int = 7
    CALENDAR_MAX_WINDOW: int = 366
    WEIGHT_TREND_DAYS: int = 14

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    @field_validator("TIMEZONE")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        v = v.strip()
        if v:
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"unknown IANA time zone: {v!r}") from exc
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
