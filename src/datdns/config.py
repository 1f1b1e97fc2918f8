"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (DATDNS__CACHE__PERSISTENT=true)
  2. datdns.yaml            (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. Every field has a default, so embedding
applications can construct ``Settings()`` without any file present.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from datdns.models.resolution import NEGATIVE_TTL, DohProvider

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("datdns")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "names.db")

DEFAULT_DOH_PROVIDERS: tuple[DohProvider, ...] = (
    DohProvider(host="cloudflare-dns.com", port=443, path="/dns-query"),
    DohProvider(host="dns.google", port=443, path="/resolve"),
    DohProvider(host="dns.quad9.net", port=5053, path="/dns-query"),
)


def _find_config_file() -> str | None:
    """Return the path of the first datdns.yaml found, or None."""
    candidates = [
        Path("datdns.yaml"),
        Path(platformdirs.user_config_dir("datdns")) / "datdns.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class DohSettings(BaseModel):
    providers: list[DohProvider] = list(DEFAULT_DOH_PROVIDERS)
    # Pin a single provider instead of picking one at random per resolver
    provider: DohProvider | None = None


class RecordSettings(BaseModel):
    protocol_scheme: str = "dat"
    txt_label: str = "datkey"
    well_known_path: str = "/.well-known/dat"
    hash_pattern: str = r"^[0-9a-f]{64}$"


class TransportSettings(BaseModel):
    timeout_seconds: float = 2.0
    user_agent: str = "datdns/1.0"


class CacheSettings(BaseModel):
    persistent: bool = False
    db_path: str = _DEFAULT_DB_PATH
    negative_ttl_seconds: int = NEGATIVE_TTL
    sweep_interval_seconds: int = 60
    persistent_retention_days: int = 30


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DATDNS__TRANSPORT__TIMEOUT_SECONDS=5
        env_prefix="DATDNS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    doh: DohSettings = DohSettings()
    records: RecordSettings = RecordSettings()
    transport: TransportSettings = TransportSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
