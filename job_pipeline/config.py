"""Runtime settings.

Values come from the environment (prefix `JOB_PIPELINE_`) or a local `.env` file.
The pipeline itself only needs the reference timezone; the rest configures the
collaborator adapters and the CLI.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JOB_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Deadlines are judged against "now" in this fixed offset (Asia/Ho_Chi_Minh).
    reference_utc_offset_hours: int = 7

    # Collaborators
    store_base_url: str = "http://localhost:3001/api"
    esco_api_base: str = "https://ec.europa.eu/esco/api"
    vsic_api_base: str = "http://localhost:3001/api/industries"
    provinces_api_url: str = "https://provinces.open-api.vn/api/v2/"
    http_timeout_s: float = 20.0
    taxonomy_min_query_length: int = 2
    # Retries on HTTP 429 from the record store, with exponential backoff.
    store_max_retries: int = 3
    store_backoff_s: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
