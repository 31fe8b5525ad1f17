import pytest
from pydantic import ValidationError

from typedhash.app.config import HashSettings, get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "TYPEDHASH_DEFAULT_HASH_TYPE_ID",
        "TYPEDHASH_MAX_PAYLOAD_SIZE_KB",
        "TYPEDHASH_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = HashSettings(_env_file=None)

    assert settings.default_hash_type_id == 1
    assert settings.max_payload_size_kb == 1024
    assert settings.max_payload_size_bytes == 1024 * 1024
    assert settings.log_level == "INFO"


def test_values_are_read_from_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TYPEDHASH_DEFAULT_HASH_TYPE_ID", "2")
    monkeypatch.setenv("TYPEDHASH_MAX_PAYLOAD_SIZE_KB", "8")
    monkeypatch.setenv("TYPEDHASH_LOG_LEVEL", "debug")

    settings = HashSettings(_env_file=None)

    assert settings.default_hash_type_id == 2
    assert settings.max_payload_size_bytes == 8 * 1024
    assert settings.log_level == "DEBUG"


def test_unknown_log_level_fails_fast(monkeypatch):
    monkeypatch.setenv("TYPEDHASH_LOG_LEVEL", "LOUD")

    with pytest.raises(ValidationError):
        HashSettings(_env_file=None)


@pytest.mark.parametrize("value", ["0", "-1", "abc"])
def test_invalid_default_type_fails_fast(monkeypatch, value):
    monkeypatch.setenv("TYPEDHASH_DEFAULT_HASH_TYPE_ID", value)

    with pytest.raises(ValidationError):
        HashSettings(_env_file=None)


def test_settings_are_frozen():
    settings = HashSettings(_env_file=None)

    with pytest.raises(ValidationError):
        settings.log_level = "DEBUG"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
