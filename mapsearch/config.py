from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Job store
    database_url: str = "sqlite+aiosqlite:///./mapsearch.db"

    # Geocoding service (Nominatim-compatible)
    geocoder_api_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "mapsearch/0.1"
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0)

    # Scraper service
    scraper_api_url: str = "http://scraper:8000"
    scraper_api_key: str = ""

    # Claim loop
    max_concurrent: int = Field(default=5, ge=1)
    claim_interval_ms: int = Field(default=2000, gt=0)
    shutdown_timeout_seconds: float = Field(default=30.0, ge=0)

    # Scrape execution
    scrape_timeout_ms: int = Field(default=45000, gt=0)
    retry_count: int = Field(default=1, ge=0)
    retry_backoff_ms: int = Field(default=1000, ge=0)
    max_concurrent_scrapes: int = Field(default=5, ge=1)
    query_max_length: int = Field(default=100, ge=1)

    # Result cache
    cache_ttl_seconds: int = Field(default=600, gt=0)
    cache_sweep_interval_seconds: int = Field(default=120, gt=0)

    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
