from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLOUDUP_",
        case_sensitive=False,
    )

    # Version of this tool, matched against channel kopsVersions ranges
    tool_version: str = "1.6.0"

    aws_region: str = "us-east-1"

    channel_base_url: str = "https://raw.githubusercontent.com/kubernetes/kops/master/channels/"
    stable_version_url: str = "https://storage.googleapis.com/kubernetes-release/release/stable.txt"

    http_timeout: float = 30.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
