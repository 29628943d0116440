"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]


class Settings(BaseSettings):
    """Environment-driven identity settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    token_secret_key: NonEmptyStr = Field(
        validation_alias=AliasChoices("TOKEN_SECRET_KEY", "PRIVATE_KEY"),
    )
    token_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        validation_alias="TOKEN_ALGORITHM",
    )
    token_lifetime_seconds: PositiveInt | None = Field(
        default=None,
        validation_alias="TOKEN_LIFETIME_SECONDS",
    )
    password_hash_workers: PositiveInt = Field(
        default=4,
        validation_alias="PASSWORD_HASH_WORKERS",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
