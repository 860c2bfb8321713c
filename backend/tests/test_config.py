import pytest

from snap2html.config import Settings, load_settings
from snap2html.errors import Misconfigured
from snap2html.utils import parse_flag


def test_load_settings_defaults(monkeypatch):
    for name in ["VERCEL_API_KEY", "V0_MODEL", "V0_MAX_TOKENS", "V0_TEMPERATURE", "PORT", "CORS_ALLOW_ORIGINS"]:
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.api_key is None
    assert settings.model == "v0-1.0-md"
    assert settings.temperature == 0.7
    assert settings.max_tokens == 8000
    assert settings.port == 3000
    assert settings.cors_allow_origins == ["*"]


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("VERCEL_API_KEY", "secret")
    monkeypatch.setenv("PORT", "4100")
    monkeypatch.setenv("V0_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
    settings = load_settings()
    assert settings.api_key == "secret"
    assert settings.port == 4100
    assert settings.timeout_seconds == 30.0
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]


def test_malformed_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("V0_MAX_TOKENS", "lots")
    monkeypatch.setenv("PORT", "")
    settings = load_settings()
    assert settings.max_tokens == 8000
    assert settings.port == 3000


def test_require_api_key():
    assert Settings(api_key="abc").require_api_key() == "abc"
    with pytest.raises(Misconfigured) as info:
        Settings(api_key=None).require_api_key()
    assert info.value.status_code == 500


@pytest.mark.parametrize(
    "raw,expected",
    [("true", True), ("TRUE", True), (" true ", True), ("false", False), ("1", False), ("", False), (None, False)],
)
def test_parse_flag(raw, expected):
    assert parse_flag(raw) is expected
