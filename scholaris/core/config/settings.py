# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scholaris configuration read from the environment and ``.env``.

Each concern owns a BaseSettings group with its own variable prefix
(DB_, JWT_, GENERATION_, SESSION_, RATE_LIMIT_, CORS_); provider keys
use their conventional names such as GOOGLE_API_KEY. Settings nests the
groups and refuses to start in production with the development JWT
secret.

Example:
    >>> settings = get_settings()
    >>> settings.generation.structured_output
    False
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool sizing, read from DB_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "scholaris"
    password: SecretStr = SecretStr("scholaris_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "scholaris"
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class LLMSettings(BaseSettings):
    """Model providers reachable through LiteLLM.

    Gemini is the default. Each provider has a key and a default model;
    Ollama needs a server URL instead of a key. ``max_retries`` is passed
    to LiteLLM as num_retries.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    default_provider: Literal["google", "openai", "anthropic", "ollama"] = "google"

    # Google
    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GOOGLE_API_KEY",
    )
    google_default_model: str = Field(
        default="gemini-1.5-flash",
        validation_alias="GOOGLE_DEFAULT_MODEL",
    )

    # OpenAI
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    openai_default_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_DEFAULT_MODEL",
    )

    # Anthropic
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="ANTHROPIC_API_KEY",
    )
    anthropic_default_model: str = Field(
        default="claude-3-5-haiku-20241022",
        validation_alias="ANTHROPIC_DEFAULT_MODEL",
    )

    # Ollama
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias="OLLAMA_BASE_URL",
    )
    ollama_default_model: str = Field(
        default="qwen2.5:7b",
        validation_alias="OLLAMA_DEFAULT_MODEL",
    )

    request_timeout: float = 60.0
    max_retries: int = 0

    def get_default_model(self) -> str:
        """Get the default model for the configured provider.

        Returns:
            Model identifier string in LiteLLM format.
        """
        models = {
            "google": f"gemini/{self.google_default_model}",
            "openai": self.openai_default_model,
            "anthropic": self.anthropic_default_model,
            "ollama": f"ollama/{self.ollama_default_model}",
        }
        return models[self.default_provider]

    def get_api_key(self, model: str) -> str | None:
        """Get the API key matching a LiteLLM model string.

        Args:
            model: Model identifier in LiteLLM format.

        Returns:
            The secret value, or None when the provider needs no key.
        """
        if model.startswith("gemini/"):
            key = self.google_api_key
        elif model.startswith("ollama/"):
            return None
        elif model.startswith("claude"):
            key = self.anthropic_api_key
        else:
            key = self.openai_api_key
        return key.get_secret_value() if key else None


class GenerationSettings(BaseSettings):
    """AI content generation parameters.

    Attributes:
        temperature: Sampling temperature for generation requests.
        max_output_tokens: Upper bound on completion tokens.
        structured_output: Ask the provider for JSON mode output.
    """

    model_config = SettingsConfigDict(
        env_prefix="GENERATION_",
        extra="ignore",
    )

    temperature: float = 0.7
    max_output_tokens: int = 2048
    structured_output: bool = False


class JWTSettings(BaseSettings):
    """Signing key, algorithm and lifetime of access tokens."""

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=30,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class SessionSettings(BaseSettings):
    """Login session housekeeping.

    Attributes:
        cleanup_interval_minutes: How often expired sessions are purged.
    """

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        extra="ignore",
    )

    cleanup_interval_minutes: int = 60


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        enabled: Whether limits are enforced.
        requests_per_minute: Maximum requests per minute per client.
        generation_per_minute: Limit applied to AI generation endpoints.
        storage_uri: Storage backend for slowapi counters.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    enabled: bool = True
    requests_per_minute: int = 60
    generation_per_minute: int = 10
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """Browser origins allowed to call the API.

    ``origins`` is a comma separated list; see origins_list.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """Uvicorn bind address and process options used by scholaris.main."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False


class Settings(BaseSettings):
    """Top-level settings.

    Process-wide flags live here; every concern hangs off an attribute
    named after it (db, llm, generation, jwt, session, rate_limit, cors,
    api). Obtain the cached instance through get_settings().
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Refuse the development JWT secret when environment is production."""
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next call re-reads the environment."""
    get_settings.cache_clear()
