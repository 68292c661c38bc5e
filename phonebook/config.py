from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PHONEBOOK_", extra="ignore", populate_by_name=True)

    # Service
    service_name: str = "phonebook"
    environment: str = "dev"
    log_level: str = "INFO"

    # HTTP
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("PHONEBOOK_PORT", "PORT"))
    cors_origins: str = "*"

    # MongoDB
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/phonebook",
        validation_alias=AliasChoices("PHONEBOOK_MONGODB_URI", "MONGODB_URI"),
    )
    mongodb_db: str = "phonebook"  # used when the URI has no default database
    mongodb_collection: str = "contacts"
    mongodb_max_pool_size: int = 100
    mongodb_timeout_ms: int = 5000

    # Contacts API
    page_size: int = Field(default=10, ge=1)
    search_limit: int = Field(default=10, ge=1)
    # Old clients expect storage failures on create/update as 400.
    legacy_write_error_status: bool = False

    def safe_summary(self) -> dict:
        """Configuration summary without secrets."""
        return {
            "service": {
                "name": self.service_name,
                "environment": self.environment,
            },
            "database": {
                "uri_set": bool(self.mongodb_uri),
                "db": self.mongodb_db,
                "collection": self.mongodb_collection,
                "max_pool_size": self.mongodb_max_pool_size,
            },
            "api": {
                "page_size": self.page_size,
                "search_limit": self.search_limit,
                "legacy_write_error_status": self.legacy_write_error_status,
            },
        }

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def load_settings() -> Settings:
    return Settings()
