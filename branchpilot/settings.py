"""Settings and config file resolution.

Config file precedence (highest to lowest):
1. config_path argument (--config CLI flag)
2. BRANCHPILOT_CONFIG_PATH env var (or .env in cwd)
3. ~/.config/branchpilot/config.toml
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from tomlkit.exceptions import TOMLKitError

from branchpilot.constants import DEFAULT_CONFIG
from branchpilot.errors import ConfigError
from branchpilot.models import BranchPilotConfig

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "branchpilot" / "config.toml"


class BranchPilotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BRANCHPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path | None = None
    repo: str | None = None  # key into repoOverrides
    git_dir: Path = Path(".")  # working tree used for branch creation


def get_settings() -> BranchPilotSettings:
    return BranchPilotSettings()


@lru_cache(maxsize=8)
def _load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load a config TOML file, returning an empty document if missing."""
    if not path.exists():
        return tomlkit.document()
    with path.open() as fh:
        return tomlkit.load(fh)


def deep_merge(base: Mapping, override: Mapping) -> dict:
    """Recursively merge override into base. Lists are replaced, not merged."""
    result = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def load_config(path: Path) -> BranchPilotConfig:
    """Load the stored config merged over the shipped defaults."""
    try:
        stored = _load_toml(path).unwrap()
    except (OSError, TOMLKitError) as exc:
        raise ConfigError(f"Could not read {path}: {exc}") from exc

    if not stored:
        logger.debug("No stored config at %s, using defaults", path)
    merged = deep_merge(DEFAULT_CONFIG, stored)
    try:
        return BranchPilotConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}:\n{exc}") from exc


def save_config(config: BranchPilotConfig, path: Path) -> None:
    """Write config as camelCase TOML, preserving comments of an existing file."""
    doc = tomlkit.parse(path.read_text()) if path.exists() else tomlkit.document()
    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["schemaVersion"] = 1
    for key, value in data.items():
        doc[key] = value

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomlkit.dumps(doc))
    _load_toml.cache_clear()
    logger.info("Config saved to %s", path)


def repo_config(config: BranchPilotConfig, repo: str | None) -> BranchPilotConfig:
    """Return config with repoOverrides[repo] applied to the defaults."""
    override = config.repo_overrides.get(repo) if repo else None
    if override is None:
        return config

    update: dict = {}
    if override.default_template is not None:
        update["template"] = override.default_template
    if override.work_item_state is not None:
        update["work_item_state"] = override.work_item_state
    defaults = config.defaults.model_copy(update=update)
    return config.model_copy(update={"defaults": defaults})


def resolve_config_path(config_path: Path | None = None) -> Path:
    return config_path or get_settings().config_path or CONFIG_PATH


def get_config(config_path: Path | None = None, repo: str | None = None) -> BranchPilotConfig:
    """Resolve the config file, load it and apply the active repo's overrides."""
    config = load_config(resolve_config_path(config_path))
    return repo_config(config, repo or get_settings().repo)
