"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env file.
Components receive a Settings instance explicitly; get_settings()
only provides the cached default.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -----------------
    # Application
    # -----------------
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    # -----------------
    # Embeddings
    # -----------------
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key, required for the openai embedding provider",
    )
    embedding_provider: str = Field(
        default="local",
        description="Default embedding provider: openai or local",
    )
    local_embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="sentence-transformers model for the local provider",
    )
    openai_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model",
    )
    embedding_batch_size: int = Field(
        default=64,
        description="Texts per embedding call when building an index",
    )

    # -----------------
    # Data
    # -----------------
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding table files (.jsonl, .json, .csv)",
    )
    results_dir: Path = Field(
        default=Path("data/results"),
        description="Directory where experiment results are written",
    )

    # -----------------
    # Experiments
    # -----------------
    default_training_ratio: float = Field(
        default=0.8,
        description="Share of rows used to build the index",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the train/test shuffle (None = not reproducible)",
    )

    @field_validator("embedding_provider")
    @classmethod
    def check_provider(cls, v: str) -> str:
        v = v.lower()
        if v not in ("openai", "local"):
            raise ValueError(f"Unknown embedding provider: {v}. Use 'openai' or 'local'.")
        return v

    @field_validator("default_training_ratio")
    @classmethod
    def check_ratio(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError("default_training_ratio must be strictly between 0 and 1")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
