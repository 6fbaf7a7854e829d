from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List
from urllib.parse import quote
import os


class Settings(BaseSettings):
    """Global app settings loaded from environment.
    - Keep defaults light for dev.
    - Override via .env or real env vars.
    """

    APP_NAME: str = "healthcare_api"
    APP_DEBUG: bool = False
    # Deployment environment name, shared with the tracing agent
    NODE_ENV: str = "staging"
    DD_TRACE_ENABLED: bool = False

    HOST: str = "0.0.0.0"
    PORT: int = 5001

    # Mongo connection pieces; MONGODB_URI is only honoured without credentials
    MONGODB_HOST: str = "localhost"
    MONGODB_PORT: str = "27017"
    MONGODB_USERNAME: str | None = None
    MONGODB_PASSWORD: str | None = None
    MONGODB_DATABASE: str = "healthcare-app"
    MONGODB_URI: str | None = None

    # Raw CORS string from env (comma-separated); parsed via cors_origins property
    CORS_ORIGINS: str | None = None

    LOG_DIR: str = "logs"

    # Base URL the booking client talks to
    API_BASE_URL: str = "http://127.0.0.1:5001"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        """Return CORS origins as a list, parsing comma-separated env string."""
        raw = self.CORS_ORIGINS or os.getenv("CORS_ORIGINS", "") or ""
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def uses_auth(self) -> bool:
        return bool(self.MONGODB_USERNAME and self.MONGODB_PASSWORD)

    @property
    def mongodb_uri(self) -> str:
        """Connection string built from the MONGODB_* pieces.

        Credentials win over MONGODB_URI; the password is URL-encoded so
        special characters survive.
        """
        if self.uses_auth:
            password = quote(self.MONGODB_PASSWORD, safe="")
            return (
                f"mongodb://{self.MONGODB_USERNAME}:{password}"
                f"@{self.MONGODB_HOST}:{self.MONGODB_PORT}/{self.MONGODB_DATABASE}"
                "?authSource=admin"
            )
        if self.MONGODB_URI:
            return self.MONGODB_URI
        return f"mongodb://{self.MONGODB_HOST}:{self.MONGODB_PORT}/{self.MONGODB_DATABASE}"

    @property
    def mongodb_database(self) -> str:
        """Database name: taken from an explicit MONGODB_URI path when present."""
        if self.MONGODB_URI and not self.uses_auth:
            db_name = self.MONGODB_URI.rsplit("/", 1)[-1].split("?")[0]
            if db_name:
                return db_name
        return self.MONGODB_DATABASE


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
