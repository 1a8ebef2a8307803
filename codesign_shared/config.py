"""
Shared configuration management for the code-signing thumbprint bundle verifier.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Producer of the thumbprint bundle and the consumers it is minted for
DEFAULT_ISSUER = "https://devolutions.net/productinfo/codesign-thumbprints"
DEFAULT_AUDIENCE = "urn:devolutions:update-clients"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CODESIGN_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class ThumbprintBundleConfig(BaseConfig):
    """Expected bundle identity and validity policy."""

    issuer: str = Field(default=DEFAULT_ISSUER, min_length=1)
    audience: str = Field(default=DEFAULT_AUDIENCE, min_length=1)

    # Clock skew tolerated on nbf/exp/iat, in seconds
    leeway_seconds: int = Field(default=0, ge=0)


def get_config(**overrides) -> ThumbprintBundleConfig:
    """Get bundle configuration, with explicit overrides taking precedence over the environment."""
    return ThumbprintBundleConfig(**{k: v for k, v in overrides.items() if v is not None})
