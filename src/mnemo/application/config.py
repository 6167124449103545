from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mnemo.domain.constants import DEFAULT_DUE_LIMIT, MAX_DUE_LIMIT


def config_files() -> list[Path]:
    """Candidate config files, in priority order."""
    return [
        Path.home() / ".config/mnemo/config.toml",
        Path.home() / ".mnemo.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for mnemo.
    Supports loading from:
    1. Manual overrides (CLI)
    2. Environment variables (MNEMO_*)
    3. Config file (~/.config/mnemo/config.toml or ~/.mnemo.toml)

    SM-2 constants are deliberately not configurable; see mnemo.domain.constants.
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEMO_",
        extra="ignore",
    )

    # Storage
    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".config/mnemo/reviews.yaml"
    )

    # Review defaults
    default_reviewer: str | None = None
    default_due_limit: int = DEFAULT_DUE_LIMIT
    max_due_limit: int = MAX_DUE_LIMIT

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("store_path", mode="before")
    @classmethod
    def resolve_store_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("default_due_limit", "max_due_limit")
    @classmethod
    def check_positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("limit must be a positive integer")
        return v

    @model_validator(mode="after")
    def check_default_within_max(self) -> "AppConfig":
        if self.default_due_limit > self.max_due_limit:
            raise ValueError(
                f"default_due_limit ({self.default_due_limit}) exceeds "
                f"max_due_limit ({self.max_due_limit})"
            )
        return self


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/mnemo/config.toml (if exists)
    3. Environment variables (MNEMO_*)
    4. cli_overrides (passed from Typer); None values are ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
