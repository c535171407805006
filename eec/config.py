"""Environment configuration files and applying them to an environment."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any

from eec.utils import _expand, file_ext

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration document has the wrong shape."""


@dataclass
class Env:
    """One environment entry: a name and a string or list of strings."""

    key: str = ""
    value: Any = None


@dataclass
class Config:
    """A set of environment entries to apply before running a program."""

    envs: list[Env] = field(default_factory=list)

    def apply_envs(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Set every entry in *environ* (the process environment by default).

        Strings are expanded; lists are expanded and joined with the path
        separator. A list for ``Path`` (any case) is appended to the PATH
        that was in place before any entry was applied.
        """
        target = os.environ if environ is None else environ
        separator = os.pathsep
        current_paths = target.get("PATH", "").split(separator)

        for env in self.envs:
            key = env.key
            if not key:
                logger.warning("env key is empty: %r", env)
                continue

            value = env.value
            if isinstance(value, str):
                target[key] = _expand(value, target)
            elif isinstance(value, list):
                parts = []
                for element in value:
                    if isinstance(element, str):
                        parts.append(_expand(element, target))
                    else:
                        logger.warning(
                            "env array element is not a string: key=%s element=%r",
                            key,
                            element,
                        )
                joined = separator.join(parts)
                if key.lower() == "path":
                    target[key] = separator.join([*current_paths, joined])
                else:
                    target[key] = joined
            else:
                logger.warning("unsupported env value type: key=%s value=%r", key, value)


def _config_from_document(document: dict[str, Any]) -> Config:
    entries = document.get("envs", [])
    if not isinstance(entries, list):
        raise ConfigError("'envs' must be an array of tables")
    envs = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError("each item of 'envs' must be a table")
        key = entry.get("key", "")
        if not isinstance(key, str):
            raise ConfigError("'key' of an env entry must be a string")
        envs.append(Env(key=key, value=entry.get("value")))
    return Config(envs=envs)


def read_toml(file_name: str | os.PathLike[str]) -> Config:
    """Read a TOML configuration file."""
    with open(file_name, "rb") as handle:
        document = tomllib.load(handle)
    return _config_from_document(document)


def read_inline_toml(toml_data: str) -> Config:
    """Parse TOML configuration given as text."""
    return _config_from_document(tomllib.loads(toml_data))


def read_config(file_name: str | os.PathLike[str]) -> Config:
    """Read a configuration file chosen by its extension.

    Only TOML has content; YAML, JSON and other files give an empty Config.
    """
    if file_ext(file_name) == ".toml":
        return read_toml(file_name)
    return Config()


def read_inline_config(text: str) -> Config:
    """Parse inline configuration, chosen by the extension its text ends with.

    Only text ending in ``.toml`` is parsed; anything else gives an empty Config.
    """
    if file_ext(text) == ".toml":
        return read_inline_toml(text)
    return Config()