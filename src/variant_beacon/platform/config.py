"""Application configuration using pydantic-settings."""

import os
import re
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from variant_beacon.platform.errors import InvalidConfigError

CONFIG_FILE_ENV_VAR = "BEACON_CONFIG_FILE"

# project.dataset.table; project ids may be domain-scoped ("example.com:proj").
TABLE_ID_RE = re.compile(
    r"^(?P<project>[A-Za-z0-9][A-Za-z0-9_.:-]*)\.(?P<dataset>\w+)\.(?P<table>[\w$-]+)$"
)

AuthMode = Literal["open", "auth"]


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from a TOML config file."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        path = Path(os.environ.get(CONFIG_FILE_ENV_VAR) or "config.toml")
        path = path.expanduser().resolve()

        if not path.exists():
            self._data: dict[str, object] = {}
        else:
            with path.open("rb") as handle:
                self._data = tomllib.load(handle)

    def get_field_value(
        self, field: object, field_name: str
    ) -> tuple[object, str, bool]:
        # Settings are all scalars; TOML already types them.
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, object]:
        data: dict[str, object] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_env: Literal["development", "staging", "production"] = "development"
    api_docs_enabled: bool = True

    # BigQuery
    google_cloud_project: str = ""
    google_bigquery_table: str = Field(
        default="",
        description="Allele table to query, as project.dataset.table.",
    )

    # Beacon
    beacon_auth_mode: AuthMode = "open"
    beacon_require_coordinate: bool = True
    beacon_query_timeout_seconds: float | None = None
    beacon_id: str = "variant-beacon"
    beacon_name: str = "Variant Beacon"
    beacon_api_version: str = "0.3.0"
    beacon_organization: str = ""
    beacon_description: str = "GA4GH Beacon backed by a BigQuery variants table"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @computed_field
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            TomlConfigSettingsSource(settings_cls),
        )


@dataclass(frozen=True)
class BeaconConfig:
    """Read-only configuration handed to the executor and service.

    Built once from :class:`Settings`; core code never reads the environment.
    """

    project_id: str
    table_id: str
    auth_mode: AuthMode = "open"
    require_coordinate: bool = True
    query_timeout_seconds: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "BeaconConfig":
        """Validate settings and build the beacon configuration.

        :param settings: Loaded application settings.
        :returns: Immutable beacon configuration.
        :raises InvalidConfigError: If the project or table is missing or malformed.
        """
        if not settings.google_cloud_project:
            raise InvalidConfigError(
                "validating GOOGLE_CLOUD_PROJECT value", "value is mandatory"
            )
        if not settings.google_bigquery_table:
            raise InvalidConfigError(
                "validating GOOGLE_BIGQUERY_TABLE value", "value is mandatory"
            )
        if not TABLE_ID_RE.match(settings.google_bigquery_table):
            raise InvalidConfigError(
                "validating GOOGLE_BIGQUERY_TABLE value",
                "expected the form project.dataset.table",
            )
        return cls(
            project_id=settings.google_cloud_project,
            table_id=settings.google_bigquery_table,
            auth_mode=settings.beacon_auth_mode,
            require_coordinate=settings.beacon_require_coordinate,
            query_timeout_seconds=settings.beacon_query_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_beacon_config() -> BeaconConfig:
    """Get the cached beacon configuration derived from settings."""
    return BeaconConfig.from_settings(get_settings())
