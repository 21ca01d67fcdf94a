"""
Runtime configuration

Values come from environment variables, with a local .env file as fallback.
"""

import logging
import secrets
from typing import List

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # MongoDB
    database_url: str = Field(
        "mongodb://localhost:27017",
        validation_alias=AliasChoices("DATABASE_URL", "CONNECTION_URI"),
    )
    database_name: str = Field("movies", alias="DATABASE_NAME")

    # JWT
    jwt_secret: str = Field("", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    jwt_expires_in: int = Field(86400, alias="JWT_EXPIRES_IN")

    # Passwords
    bcrypt_rounds: int = Field(12, alias="BCRYPT_ROUNDS")

    # HTTP
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    port: int = Field(8000, alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _ensure_secret(self) -> "Settings":
        if not self.jwt_secret:
            # Tokens signed with this secret stop validating on restart
            logger.warning("JWT_SECRET is not set, signing tokens with a random per-process secret")
            self.jwt_secret = secrets.token_urlsafe(32)
        return self

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
