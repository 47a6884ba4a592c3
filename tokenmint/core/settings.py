"""Token settings loaded from environment variables."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ISSUER_DEFAULT = "https://www.hotjoe.com/"
SECONDS_TO_EXPIRATION_DEFAULT = 3600


class TokenSettings(BaseSettings):
    """Issuance defaults, key file locations, and logging options."""

    model_config = SettingsConfigDict(env_prefix="TOKEN_")

    issuer: str = ISSUER_DEFAULT
    seconds_to_expiration: int = Field(default=SECONDS_TO_EXPIRATION_DEFAULT, gt=0)
    private_key_path: str = "private.pkcs8"
    public_key_path: str = "public.pem"
    leeway_seconds: int = Field(default=0, ge=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
