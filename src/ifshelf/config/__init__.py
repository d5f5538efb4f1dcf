"""Settings file handling for ifshelf.

The settings live in a single YAML document (``~/.ifshelf/config.yaml`` by
default). Values are layered over the built-in defaults, then over
``IFSHELF__SECTION__KEY`` environment variables and finally over dotted
command-line overrides such as ``storage.root``.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import IfShelfConfig, InputSettings, LoggingSettings, StorageSettings
from .resolver import (
    assign_dotted,
    env_key_to_dotted,
    flatten_for_env,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.ifshelf/config.yaml")
STAMP_PREFIX = "# Last updated: "
_HEADER = (
    "# ifshelf settings: library location, command input and logging.\n"
    "# Change values with `ifshelf config set KEY --value VALUE` or `ifshelf config edit`.\n"
)


def parse_document(text: str) -> dict[str, Any]:
    """Parse the text of a settings file into its top-level mapping.

    Raises:
        ConfigError: If the text is not YAML or is not a mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping at the top level.")
    return data


def env_overrides_from(environ: Mapping[str, str]) -> dict[str, Any]:
    """Pick the ``IFSHELF__`` variables out of ``environ`` as dotted overrides.

    Values are read as YAML scalars so ``4096`` becomes an int; text YAML
    cannot parse is kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for name, raw in environ.items():
        dotted = env_key_to_dotted(name)
        if dotted is None:
            continue
        try:
            overrides[dotted] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[dotted] = raw
    return overrides


class ConfigManager:
    """Owns the settings file: creation, validation, updates and resolution."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the resolved settings file path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> IfShelfConfig:
        """Return the effective settings.

        Args:
            cli_overrides: Dotted or nested overrides with the highest priority.
            include_env: Whether ``IFSHELF__`` environment variables apply.
            ensure_file: Write a default settings file first when none exists.
            env_overrides: Environment mapping to use instead of the process one.

        Raises:
            ConfigError: If the file is unreadable or a merged value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        environ: Mapping[str, str] = {}
        if include_env:
            environ = self._env if env_overrides is None else env_overrides

        return resolve_with_precedence(
            defaults=IfShelfConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_overrides_from(environ) or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the settings file, or nothing if absent."""
        text = self.read_text()
        return parse_document(text) if text else {}

    def save(self, config: IfShelfConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to the settings file with a fresh timestamp."""
        if isinstance(config, IfShelfConfig):
            data = config.model_dump(mode="json")
        else:
            data = dict(config)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(f"{_HEADER}{STAMP_PREFIX}{stamp}\n{body}", encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Write the default settings unless a settings file is already present."""
        if not self._config_path.exists():
            self.save(IfShelfConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the raw settings file text, or an empty string if absent."""
        try:
            return self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def set_value(self, key: str, value: Any) -> IfShelfConfig:
        """Store ``value`` under the dotted ``key`` in the settings file.

        The file is only rewritten when the updated document validates.

        Raises:
            ConfigError: If the key is malformed or the result does not validate.
        """
        data = self.load_file_overrides()
        assign_dotted(data, key, value)
        config = resolve_with_precedence(defaults=IfShelfConfig(), file_overrides=data)
        self.save(data)
        return config

    def replace_text(self, text: str) -> IfShelfConfig:
        """Replace the settings file with edited ``text`` after validating it.

        Raises:
            ConfigError: If the text does not parse or does not validate.
        """
        data = parse_document(text)
        config = resolve_with_precedence(defaults=IfShelfConfig(), file_overrides=data)
        self.save(data)
        return config


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "STAMP_PREFIX",
    "IfShelfConfig",
    "StorageSettings",
    "InputSettings",
    "LoggingSettings",
    "parse_document",
    "env_overrides_from",
    "resolve_with_precedence",
    "assign_dotted",
    "flatten_for_env",
    "ConfigError",
]
