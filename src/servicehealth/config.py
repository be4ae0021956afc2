"""Configuration management using Pydantic Settings.

Loads configuration from multiple sources with the following priority (highest first):
1. Environment variables (SERVICEHEALTH_* prefix, plus SERVICE_NAME,
   SERVICE_VERSION, ENVIRONMENT and PORT)
2. .env file
3. config.local.yaml (if exists)
4. config.yaml
5. Default values

Settings are read once when the application is created. Nothing re-reads
them afterwards, so a running process never changes behavior because the
environment changed underneath it.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from servicehealth import __version__


class CorsSettings(BaseModel):
    """CORS configuration."""

    allowed_origins: list[str] = ["*"]
    allowed_methods: list[str] = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    allowed_headers: list[str] = [
        "Content-Type",
        "Authorization",
        "X-Request-ID",
    ]


class ServerSettings(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 3000
    shutdown_timeout_seconds: int = 30
    cors: CorsSettings = Field(default_factory=CorsSettings)


class ServiceSettings(BaseModel):
    """Service identity reported by the info and health endpoints."""

    name: str = "Service"
    version: str = __version__
    environment: str = "development"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class CheckConfig(BaseModel):
    """Declarative dependency check."""

    name: str
    kind: Literal["database", "external_api", "dependency"]
    url: str | None = None
    required_env: list[str] = Field(default_factory=list)
    timeout_seconds: float | None = Field(default=None, gt=0)
    readiness: bool = True


class HealthSettings(BaseModel):
    """Health check configuration."""

    timeout_seconds: float = Field(default=5.0, gt=0)
    latency_degraded_ms: int = Field(
        default=2000,
        ge=0,
        description="External API latency above which a check reports degraded",
    )
    checks: list[CheckConfig] = Field(default_factory=list)


class ErrorSettings(BaseModel):
    """Error response configuration."""

    echo_request_id: Literal["always", "production", "never"] = "always"


class SecurityHeadersSettings(BaseModel):
    """Security response header configuration."""

    enabled: bool = True


def _load_yaml_config(config_dir: Path) -> dict:
    """Load configuration from YAML files.

    Loads config.yaml and optionally overlays config.local.yaml.
    """
    config = {}

    config_file = config_dir / "config.yaml"
    if config_file.exists():
        with open(config_file) as f:
            config = yaml.safe_load(f) or {}

    local_config_file = config_dir / "config.local.yaml"
    if local_config_file.exists():
        with open(local_config_file) as f:
            local_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, local_config)

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment, .env, and config files."""

    model_config = SettingsConfigDict(
        env_prefix="SERVICEHEALTH_",
        env_nested_delimiter="__",
        env_file=Path.home() / "servicehealth.env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    errors: ErrorSettings = Field(default_factory=ErrorSettings)
    security_headers: SecurityHeadersSettings = Field(
        default_factory=SecurityHeadersSettings
    )

    # Direct environment variable mappings for common settings
    service_name: str | None = Field(default=None, validation_alias="SERVICE_NAME")
    service_version: str | None = Field(default=None, validation_alias="SERVICE_VERSION")
    environment: str | None = Field(default=None, validation_alias="ENVIRONMENT")
    port: int | None = Field(default=None, validation_alias="PORT")

    def __init__(self, config_dir: Path | None = None, **data):
        """Initialize settings, loading from YAML if config_dir provided."""
        if config_dir is not None:
            yaml_config = _load_yaml_config(config_dir)
            # Merge YAML config with any explicit data (explicit data wins)
            merged = _deep_merge(yaml_config, data)
            super().__init__(**merged)
        else:
            super().__init__(**data)

        if self.service_name:
            self.service.name = self.service_name

        if self.service_version:
            self.service.version = self.service_version

        if self.environment:
            self.service.environment = self.environment

        if self.port:
            self.server.port = self.port

    def validate_required(self) -> None:
        """Validate that the configuration is usable.

        Raises:
            ValueError: If the configuration is inconsistent.
        """
        if not self.service.name.strip():
            raise ValueError("service.name must not be empty")

        seen: set[str] = set()
        for check in self.health.checks:
            if check.name in seen:
                raise ValueError(f"Duplicate health check name: {check.name!r}")
            seen.add(check.name)

            if check.kind in ("database", "external_api") and not check.url:
                raise ValueError(
                    f"Health check {check.name!r} of kind {check.kind!r} requires a url"
                )


@lru_cache
def get_settings(config_dir: Path | None = None) -> Settings:
    """Get cached settings instance.

    Args:
        config_dir: Optional path to config directory. If None, only environment
                   variables and .env file are used.

    Returns:
        Settings instance.
    """
    if config_dir is None:
        # Try to find config directory relative to project root
        project_root = Path(__file__).parent.parent.parent
        default_config_dir = project_root / "config"
        if default_config_dir.exists():
            config_dir = default_config_dir

    return Settings(config_dir=config_dir)
