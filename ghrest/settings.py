"""Client settings with named profile support."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "ghrest" / "config.toml"


class ConfigError(Exception):
    pass


class GhRestSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GHREST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "https://api.github.com"
    token: SecretStr | None = None
    api_version: str = "2022-11-28"
    user_agent: str = "ghrest"
    timeout: float = 30.0  # seconds, per exchange
    per_page: int = 100

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Profile values arrive as init kwargs and must lose to the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/ghrest/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    with CONFIG_PATH.open() as fp:
        return tomlkit.load(fp)


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> GhRestSettings:
    """Resolve the active profile and return fully populated settings.

    Profile precedence (highest to lowest):
    1. profile argument
    2. GHREST_PROFILE env var
    3. default_profile key in ~/.config/ghrest/config.toml
    4. First profile defined in ~/.config/ghrest/config.toml

    GHREST_* env vars and .env always override values from the profile.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("GHREST_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = toml_config[active].unwrap()
        else:
            profiles = _list_profiles(toml_config)
            raise ConfigError(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")

    return GhRestSettings(**profile_defaults)
