from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "development"
    redis_url: str = "redis://localhost:6379/0"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # When set, clients must send X-Internal-API-Key alongside X-Device-ID.
    internal_api_key: str | None = None

    cors_origins_raw: str = ""

    # Letter-value convention used when a request does not name one.
    default_system: str = "maghribi"

    # Per-device calculation history (Redis list, newest first)
    history_max_items: int = 100
    history_ttl_seconds: int = 90 * 24 * 3600

    # Verse-text provider (Al-Quran Cloud) + placeholder fallback
    quran_api_base_url: str = "https://api.alquran.cloud/v1"
    quran_text_edition: str = "quran-uthmani"
    quran_api_timeout_seconds: float = 10.0

    # Background reflection text via ARQ. Disable to skip the Redis pool entirely.
    enable_reflection_jobs: bool = True

    # Runtime LLM provider (currently only "openrouter").
    llm_provider: str = "openrouter"

    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    # Comma-separated fallback chain is allowed: "model-a,model-b"
    openrouter_model: str = "google/gemini-2.0-flash-001"
    openrouter_timeout_seconds: float = 25.0

    def cors_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if not raw:
            return []
        return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
