"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import IfShelfConfig

ENV_PREFIX = "IFSHELF__"


def resolve_with_precedence(
    *,
    defaults: IfShelfConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> IfShelfConfig:
    """Layer file, environment and CLI overrides (in that order) onto ``defaults``.

    Override keys may be nested mappings or dotted paths such as ``storage.root``.

    Raises:
        ConfigError: If an override is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        if not isinstance(source, MappingABC):
            raise ConfigError(f"{name.capitalize()} overrides must be a mapping.")
        expanded: dict[str, Any] = {}
        for key, value in source.items():
            assign_dotted(expanded, key, value, source_name=name)
        merged = _deep_merge(merged, expanded)

    try:
        return IfShelfConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def assign_dotted(
    target: dict[str, Any],
    key: str,
    value: Any,
    *,
    source_name: str = "config",
) -> None:
    """Store ``value`` under a dotted ``key``, creating intermediate mappings.

    Raises:
        ConfigError: If the key is not a string or a path segment holds a non-mapping.
    """
    if not isinstance(key, str) or not key:
        raise ConfigError(f"{source_name.capitalize()} override keys must be non-empty strings.")

    *parents, leaf = key.split(".")
    node = target
    for segment in parents:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {key} conflicts with existing value."
            )
        node = child

    if isinstance(value, MappingABC):
        nested: dict[str, Any] = {}
        for child_key, child_value in value.items():
            assign_dotted(nested, child_key, child_value, source_name=source_name)
        existing = node.get(leaf)
        node[leaf] = _deep_merge(existing if isinstance(existing, dict) else {}, nested)
    else:
        node[leaf] = value


def env_key_to_dotted(key: str) -> str | None:
    """Translate ``IFSHELF__SECTION__KEY`` into ``section.key``; None for other keys."""
    if not key.startswith(ENV_PREFIX) or len(key) == len(ENV_PREFIX):
        return None
    return ".".join(part.lower() for part in key[len(ENV_PREFIX) :].split("__"))


def flatten_for_env(config: IfShelfConfig) -> Dict[str, str]:
    """Flatten the config into `IFSHELF__SECTION__KEY` environment variable mappings."""
    flat: Dict[str, str] = {}

    def _recurse(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _recurse(prefix + [str(key)], child)
            return
        env_key = ENV_PREFIX + "__".join(part.upper() for part in prefix)
        flat[env_key] = "null" if value is None else str(value)

    _recurse([], config.model_dump(mode="json"))
    return flat


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "resolve_with_precedence",
    "assign_dotted",
    "env_key_to_dotted",
    "flatten_for_env",
    "ENV_PREFIX",
]
