"""Shared constants plus environment-expansion and file helpers."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Mapping

VERSION = "0.1-dev"
DEFAULT_TAG_DIR = ".eec"
DEFAULT_MANIFEST_FILE_NAME = "eec_manifest"

_ENV_REFERENCE = re.compile(r"\$\(([^)]+)\)")


def _expand(text: str, environ: Mapping[str, str]) -> str:
    """Replace every ``$(NAME)`` in *text* with its value in *environ*, or ''."""
    return _ENV_REFERENCE.sub(lambda match: environ.get(match.group(1), ""), text)


def expand_env_variables(text: str) -> str:
    """Expand ``$(NAME)`` references from the process environment.

    Unknown variables expand to an empty string.
    """
    return _expand(text, os.environ)


def expand_env_variables_list(inputs: Iterable[str]) -> list[str]:
    """Expand ``$(NAME)`` references in each string of *inputs*."""
    return [expand_env_variables(item) for item in inputs]


def file_exists(path: str | os.PathLike[str]) -> bool:
    """Return True if *path* can be stat'ed."""
    try:
        os.stat(path)
    except (OSError, ValueError):
        return False
    return True


def file_ext(path: str | os.PathLike[str]) -> str:
    """Return the suffix of the last path element, starting at its last dot.

    Returns an empty string when the last element has no dot.
    """
    name = os.fspath(path)
    for separator in {os.sep, os.altsep} - {None}:
        name = name.rsplit(separator, 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""