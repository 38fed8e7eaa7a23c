from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key, used for identity calls made on behalf of a user
    supabase_service_role_key: Optional[str] = None  # Required for data access and admin operations

    # App
    app_name: str = "courtbook"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    timezone: str = "UTC"  # wall-clock zone that session_date/start_time are expressed in

    # Reminder dispatcher
    reminder_scheduler_enabled: bool = False  # run the in-process loop instead of an external cron
    reminder_interval_seconds: int = 300
    reminder_window_start_minutes: int = 55
    reminder_window_end_minutes: int = 65
    cron_secret: Optional[str] = None  # when set, POST /reminders/dispatch requires "Bearer <cron_secret>"

    # Recurrence limits
    recurrence_max_instances: int = 365
    recurrence_max_years: int = 2

    # Comments
    comment_max_length: int = 2000

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
