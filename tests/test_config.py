"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from fieldsweep.config import Settings, get_settings


def test_settings_loads_defaults(monkeypatch):
    """Test that settings load with default values."""
    monkeypatch.delenv("EMBEDDING_PROVIDER", raising=False)
    monkeypatch.delenv("RANDOM_SEED", raising=False)
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.embedding_provider == "local"
    assert settings.default_training_ratio == 0.8
    assert settings.random_seed is None
    assert settings.openai_embedding_model == "text-embedding-3-small"

    get_settings.cache_clear()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("EMBEDDING_PROVIDER", "OpenAI")
    monkeypatch.setenv("RANDOM_SEED", "42")

    settings = Settings()

    assert settings.embedding_provider == "openai"
    assert settings.random_seed == 42


def test_unknown_provider_rejected():
    with pytest.raises(ValidationError):
        Settings(embedding_provider="word2vec")


@pytest.mark.parametrize("ratio", [0.0, 1.0, 1.5])
def test_training_ratio_must_be_open_interval(ratio):
    with pytest.raises(ValidationError):
        Settings(default_training_ratio=ratio)
