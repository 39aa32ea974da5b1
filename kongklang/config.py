"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 10
    entries_table: str = "entries"
    postgrest_page_size: int = 1000

    # LINE Messaging API
    line_channel_access_token: str
    line_channel_secret: str
    line_request_timeout_seconds: int = 10

    # App
    app_name: str = "Kongklang Bot"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    enable_scheduler: bool = True
    heartbeat_interval_seconds: int = 60
    verify_schema_on_startup: bool = True

    # Calendar used for every day/month boundary
    timezone: str = "Asia/Bangkok"

    # Display names
    display_name_ttl_seconds: int = 3600
    display_name_failure_ttl_seconds: int = 60
    display_name_cache_max_entries: int = 1024

    # Commands
    delete_confirm_ttl_seconds: int = 120
    recent_list_default: int = 5
    recent_list_max: int = 50
    past_days_max: int = 366

    # Replies
    reply_chunk_chars: int = 4800
    reply_max_chunks: int = 5
    backup_api_token: str = ""

    # Performance tuning
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0

    @property
    def backup_route_enabled(self) -> bool:
        """Return True when the CSV download route accepts requests."""
        return bool(self.backup_api_token.strip())

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
