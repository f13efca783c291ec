from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ELEVATION_MODES = {"auto", "osascript", "sudo", "pkexec", "direct"}
_MIN_TOKEN_LENGTH = 32


class Settings(BaseSettings):
    app_name: str = Field(default="HostDNI")
    app_env: str = Field(default="dev")
    app_version: str = Field(default="0.1.0")

    log_level: str = Field(default="INFO")
    log_file: str = Field(default="")

    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8080)
    cors_origins: str = Field(default="")

    hosts_path: str = Field(default="/etc/hosts")
    hosts_backup_path: str = Field(default="/etc/hosts.backup")
    hosts_disabled_path: str = Field(default="/etc/hosts.disabled")
    hosts_backups_dir: str = Field(default="")

    token_rotation_seconds: int = Field(default=600)
    token_grace_seconds: int = Field(default=60)
    token_length: int = Field(default=_MIN_TOKEN_LENGTH)

    page_size_min: int = Field(default=1000)
    page_size_max: int = Field(default=20000)
    page_size_default: int = Field(default=1000)
    stream_chunk_default: int = Field(default=1000)
    stream_chunk_max: int = Field(default=10000)
    write_batch_size: int = Field(default=1000)

    elevation_mode: str = Field(default="auto")
    metrics_enabled: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        issues: list[str] = []
        if self.token_length < _MIN_TOKEN_LENGTH:
            issues.append(f"TOKEN_LENGTH must be at least {_MIN_TOKEN_LENGTH}.")
        if self.token_rotation_seconds <= 0:
            issues.append("TOKEN_ROTATION_SECONDS must be positive.")
        if self.token_grace_seconds < 0 or self.token_grace_seconds >= self.token_rotation_seconds:
            issues.append("TOKEN_GRACE_SECONDS must be between 0 and TOKEN_ROTATION_SECONDS.")
        if self.page_size_min < 1 or self.page_size_max < self.page_size_min:
            issues.append("PAGE_SIZE_MIN/PAGE_SIZE_MAX must describe a non-empty range.")
        if self.stream_chunk_max < 1:
            issues.append("STREAM_CHUNK_MAX must be positive.")
        if self.write_batch_size < 1:
            issues.append("WRITE_BATCH_SIZE must be positive.")
        if self.elevation_mode.strip().lower() not in _ELEVATION_MODES:
            issues.append(
                "ELEVATION_MODE must be one of: " + ", ".join(sorted(_ELEVATION_MODES)) + "."
            )
        if issues:
            raise ValueError(" ".join(issues))
        return self

    def cors_origin_list(self) -> list[str]:
        return [item.strip() for item in self.cors_origins.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
