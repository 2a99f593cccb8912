"""Configuration management using Pydantic Settings."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from datastreams.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.testnet-dataengine.chain.link"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    streams_api_key: SecretStr | None = None
    streams_api_secret: SecretStr | None = None

    # Upstream
    streams_base_url: str = DEFAULT_BASE_URL
    streams_timeout_seconds: float = 10.0

    # Decoding
    streams_decode_mode: str = "full"

    # Feed catalog
    streams_feeds_path: str = "feeds.yaml"

    def credentials(self) -> tuple[str, str]:
        """Return the plain (key, secret) pair or raise if either is missing."""
        key = self.streams_api_key.get_secret_value() if self.streams_api_key else ""
        secret = self.streams_api_secret.get_secret_value() if self.streams_api_secret else ""
        missing = [
            name
            for name, value in (("STREAMS_API_KEY", key), ("STREAMS_API_SECRET", secret))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing API credentials: set {' and '.join(missing)}")
        return key, secret


settings = Settings()
