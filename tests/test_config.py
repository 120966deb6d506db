import pytest

from trueblazer.config import DEFAULT_GATEWAY_URL, DEFAULT_MODEL, get_llm_settings, get_store_settings

_LLM_ENV = (
    "TRUEBLAZER_AI_GATEWAY_API_KEY",
    "TRUEBLAZER_AI_GATEWAY_URL",
    "TRUEBLAZER_AI_MODEL",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure cached settings and ambient keys do not leak between tests."""

    for name in _LLM_ENV:
        monkeypatch.delenv(name, raising=False)
    get_llm_settings.cache_clear()
    get_store_settings.cache_clear()


def test_primary_provider_prefers_gateway(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRUEBLAZER_AI_GATEWAY_API_KEY", "test-gateway")
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai")

    settings = get_llm_settings()

    assert settings.primary_provider == "gateway"
    assert settings.get_api_key() == "test-gateway"
    assert settings.base_url == DEFAULT_GATEWAY_URL
    assert settings.resolved_model == DEFAULT_MODEL


def test_primary_provider_falls_back_to_openai(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai")

    settings = get_llm_settings()

    assert settings.primary_provider == "openai"
    assert settings.get_api_key() == "test-openai"
    assert settings.base_url is None


def test_no_keys_means_no_provider() -> None:
    settings = get_llm_settings()

    assert settings.primary_provider is None
    assert settings.get_api_key() is None
    assert not settings.has_any_keys


def test_model_and_url_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRUEBLAZER_AI_GATEWAY_API_KEY", "test-gateway")
    monkeypatch.setenv("TRUEBLAZER_AI_GATEWAY_URL", "https://gateway.example/v1")
    monkeypatch.setenv("TRUEBLAZER_AI_MODEL", "custom-model")

    settings = get_llm_settings()

    assert settings.base_url == "https://gateway.example/v1"
    assert settings.resolved_model == "custom-model"


def test_store_requires_both_url_and_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

    assert not get_store_settings().is_configured

    get_store_settings.cache_clear()
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role")

    assert get_store_settings().is_configured
