"""Centralized configuration: all env vars in one place."""

import os

VERSION = "2.0.0"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.version: str = VERSION

        # Upstream APIs
        self.ckan_base_url: str = os.getenv("CKAN_BASE_URL", "http://dados.recife.pe.gov.br/api/3")
        self.receitas_base_url: str = os.getenv(
            "RECEITAS_BASE_URL", "https://portaldatransparencia.recife.pe.gov.br/dados/api/receitas"
        )
        self.despesas_base_url: str = os.getenv(
            "DESPESAS_BASE_URL", "https://portaldatransparencia.recife.pe.gov.br/dados/api/despesas"
        )

        # Fetcher
        self.fetch_retries: int = int(os.getenv("FETCH_RETRIES", "3"))
        self.fetch_timeout_ms: int = int(os.getenv("FETCH_TIMEOUT_MS", "10000"))
        self.fetch_backoff_ms: int = int(os.getenv("FETCH_BACKOFF_MS", "1000"))
        self.user_agent: str = os.getenv("USER_AGENT", "VIGIA-Recife/2.0")

        # Cache
        self.cache_default_ttl: int = int(os.getenv("CACHE_DEFAULT_TTL", "900"))
        self.cache_flush_interval_hours: int = int(os.getenv("CACHE_FLUSH_INTERVAL_HOURS", "4"))

        self.default_year: int = int(os.getenv("DEFAULT_YEAR", "2025"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of settings that must be positive but are not."""
        positive = ["FETCH_RETRIES", "FETCH_TIMEOUT_MS", "CACHE_DEFAULT_TTL", "CACHE_FLUSH_INTERVAL_HOURS"]
        return [var for var in positive if getattr(self, _attr_for(var)) <= 0]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    return env_var.lower()
