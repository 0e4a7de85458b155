import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # API Configuration
    base_url: str = Field(
        default="https://api.example.com", alias="API_RESOURCES_BASE_URL"
    )
    api_token: str = Field(default="", alias="API_RESOURCES_TOKEN")

    # Pagination query parameter names
    page_param: str = Field(default="page", alias="API_RESOURCES_PAGE_PARAM")
    per_page_param: str = Field(
        default="per_page", alias="API_RESOURCES_PER_PAGE_PARAM"
    )

    # Cache Configuration
    cache_prefix: str = Field(
        default="filament_api_", alias="API_RESOURCES_CACHE_PREFIX"
    )
    cache_ttl: int = Field(default=300, alias="API_RESOURCES_CACHE_TTL")
    redis_url: str | None = Field(default=None, alias="API_RESOURCES_REDIS_URL")

    # Response envelope (dot notation)
    total_key: str = Field(default="data.total", alias="API_RESOURCES_TOTAL_KEY")
    results_key: str = Field(default="data.data", alias="API_RESOURCES_RESULTS_KEY")

    # HTTP Client Configuration
    timeout: float = Field(default=30, alias="API_RESOURCES_TIMEOUT")
    retry_attempts: int = Field(default=3, alias="API_RESOURCES_RETRY_ATTEMPTS")
    retry_delay: int = Field(default=100, alias="API_RESOURCES_RETRY_DELAY")  # ms

    # Logging Configuration
    logging_enabled: bool = Field(default=True, alias="API_RESOURCES_LOGGING_ENABLED")
    logging_channel: str = Field(
        default="default", alias="API_RESOURCES_LOGGING_CHANNEL"
    )
    logging_level: str = Field(default="error", alias="API_RESOURCES_LOGGING_LEVEL")
    logging_include_request_data: bool = Field(
        default=True, alias="API_RESOURCES_LOGGING_INCLUDE_REQUEST_DATA"
    )
    logging_include_response_data: bool = Field(
        default=False, alias="API_RESOURCES_LOGGING_INCLUDE_RESPONSE_DATA"
    )

    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request, before per-call overrides."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers


def load_settings() -> Settings:
    """Read settings from the environment (and .env)."""
    return Settings.model_validate(dict(os.environ))


global_settings = load_settings()
