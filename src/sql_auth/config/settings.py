"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]

DEFAULT_QUERY_TEMPLATE = "SELECT password, email FROM users WHERE name = :a"


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    sql_auth_database_url: NonEmptyStr | None = Field(
        default=None,
        validation_alias="SQL_AUTH_DATABASE_URL",
    )
    sql_auth_query: NonEmptyStr = Field(
        default=DEFAULT_QUERY_TEMPLATE,
        validation_alias="SQL_AUTH_QUERY",
    )
    sql_auth_disable_reason: str = Field(default="", validation_alias="SQL_AUTH_DISABLE_REASON")
    sql_auth_disable_email_reason: str = Field(
        default="",
        validation_alias="SQL_AUTH_DISABLE_EMAIL_REASON",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
