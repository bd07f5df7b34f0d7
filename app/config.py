from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    resolver_url: str = Field(default="http://resolver:8181", alias="RESOLVER_URL")
    locality_api_url: str = Field(default="https://viacep.com.br/ws", alias="LOCALITY_API_URL")
    weather_api_url: str = Field(default="https://api.weatherapi.com/v1/current.json", alias="WEATHER_API_URL")
    weather_api_key: str | None = Field(default=None, alias="WEATHER_API_KEY")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0, alias="UPSTREAM_TIMEOUT_SECONDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")

    @property
    def resolver_base_url(self) -> str:
        return self.resolver_url.rstrip("/")

    @property
    def locality_base_url(self) -> str:
        return self.locality_api_url.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
