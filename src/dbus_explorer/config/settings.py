"""Configuration settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from dbus_explorer.errors import ConfigValidationError, ErrorContext

VALID_BUSES = ("system", "session")
VALID_STRATEGIES = ("bfs", "dfs")
VALID_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ExplorerConfig(BaseSettings):
    """Configuration for dbus-explorer.

    Every field can be set from the environment with the ``DBUS_EXPLORER_``
    prefix (e.g. ``DBUS_EXPLORER_BUS=session``). Environment variables win
    over values loaded from a config file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DBUS_EXPLORER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bus: str = "system"
    bus_address: str | None = None
    call_timeout: float = 1.0
    exploration_timeout: float | None = None
    max_in_flight: int = 8
    max_concurrent_services: int = 4
    strategy: str = "bfs"
    include_standard_interfaces: bool = False
    include_unique_names: bool = False
    resolve_owners: bool = True
    log_level: str = "info"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # env > .env > config file (passed as init kwargs) > defaults
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("bus")
    @classmethod
    def validate_bus(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_BUSES:
            raise ConfigValidationError(
                message=f"bus must be one of {VALID_BUSES}, got {v!r}",
                field="bus",
                value=v,
                context=ErrorContext(extra={"valid": list(VALID_BUSES)}),
            )
        return v

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_STRATEGIES:
            raise ConfigValidationError(
                message=f"strategy must be one of {VALID_STRATEGIES}, got {v!r}",
                field="strategy",
                value=v,
                context=ErrorContext(extra={"valid": list(VALID_STRATEGIES)}),
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                message=f"log_level must be one of {VALID_LOG_LEVELS}, got {v!r}",
                field="log_level",
                value=v,
            )
        return v

    @field_validator("max_in_flight", "max_concurrent_services")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ConfigValidationError(
                message=f"{info.field_name} must be at least 1, got {v}",
                field=info.field_name,
                value=v,
            )
        return v

    @field_validator("call_timeout", "exploration_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None, info) -> float | None:
        if v is not None and v <= 0:
            raise ConfigValidationError(
                message=f"{info.field_name} must be positive, got {v}",
                field=info.field_name,
                value=v,
            )
        return v
