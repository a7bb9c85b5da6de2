"""Application settings — single file, Pydantic-based.

Latitude usage API:
  - LATITUDE_API_KEY set and non-empty -> bandwidth queries enabled
  - LATITUDE_API_KEY absent/empty -> bandwidth reporting disabled
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    """Project root. config.py lives at the top of the repository."""
    return Path(__file__).resolve().parent


def _ensure_env_loaded() -> None:
    """Load .env from the project root (then cwd). Idempotent."""
    root: Path = _project_root()
    for candidate in (root / ".env", Path.cwd() / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)


_ensure_env_loaded()


class RpcSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SOLANA_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc_url: str = Field(default="https://api.mainnet-beta.solana.com")
    commitment: str = Field(default="confirmed")
    rpc_timeout: float = Field(default=30.0)
    retry_attempts: int = Field(default=3)
    retry_delay: float = Field(default=1.0)


class LatitudeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LATITUDE_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="Latitude.sh API key")
    base_url: str = Field(default="https://api.latitude.sh")
    billing_start_day: int = Field(default=5, ge=1, le=31)
    timeout: float = Field(default=15.0)

    @property
    def enabled(self) -> bool:
        return bool((self.api_key or "").strip())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VOTEWATCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    rpc: RpcSettings = Field(default_factory=RpcSettings)
    latitude: LatitudeSettings = Field(default_factory=LatitudeSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
