"""Tests for environment-driven settings."""

from api_resources.settings import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.cache_prefix == "filament_api_"
    assert settings.cache_ttl == 300
    assert settings.retry_attempts == 3
    assert settings.retry_delay == 100
    assert settings.logging_level == "error"
    assert settings.logging_include_request_data is True
    assert settings.logging_include_response_data is False
    assert settings.redis_url is None


def test_from_environment_names() -> None:
    settings = Settings.model_validate(
        {
            "API_RESOURCES_BASE_URL": "https://api.acme.dev",
            "API_RESOURCES_TIMEOUT": "2.5",
            "API_RESOURCES_RETRY_ATTEMPTS": "5",
            "API_RESOURCES_LOGGING_ENABLED": "false",
            "API_RESOURCES_RESULTS_KEY": "items",
            "UNRELATED": "ignored",
        }
    )
    assert settings.base_url == "https://api.acme.dev"
    assert settings.timeout == 2.5
    assert settings.retry_attempts == 5
    assert settings.logging_enabled is False
    assert settings.results_key == "items"


def test_field_names_also_accepted() -> None:
    assert Settings(cache_ttl=10).cache_ttl == 10


def test_default_headers() -> None:
    assert "Authorization" not in Settings().default_headers()

    headers = Settings(api_token="abc").default_headers()
    assert headers["Authorization"] == "Bearer abc"
    assert headers["Accept"] == "application/json"
