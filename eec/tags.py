"""Saved run settings ("tags") stored as small binary files."""

from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass, field
from pathlib import Path

from eec.utils import DEFAULT_TAG_DIR, file_ext

logger = logging.getLogger(__name__)

_INT32 = struct.Struct("<i")
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class TagFormatError(ValueError):
    """Raised when tag data is truncated or malformed."""


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise TagFormatError("unexpected end of tag data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def int32(self) -> int:
        return _INT32.unpack(self.take(_INT32.size))[0]

    def string(self) -> str:
        length = self.int32()
        if length < 0:
            raise TagFormatError(f"negative string length {length}")
        return self.take(length).decode(_ENCODING, _ERRORS)

    def strings(self) -> list[str]:
        count = self.int32()
        if count < 0:
            raise TagFormatError(f"negative string count {count}")
        return [self.string() for _ in range(count)]


def _pack_string(text: str) -> bytes:
    raw = text.encode(_ENCODING, _ERRORS)
    return _INT32.pack(len(raw)) + raw


@dataclass
class TagData:
    """A config file, program and arguments saved under a tag name."""

    config_file: str = ""
    program: str = ""
    program_args: list[str] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Encode as length-prefixed little-endian fields."""
        parts = [
            _pack_string(self.config_file),
            _pack_string(self.program),
            _INT32.pack(len(self.program_args)),
            *(_pack_string(arg) for arg in self.program_args),
        ]
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> TagData:
        """Decode data produced by :meth:`to_bytes`."""
        reader = _Reader(data)
        return cls(
            config_file=reader.string(),
            program=reader.string(),
            program_args=reader.strings(),
        )

    def write(self, tag_name: str, home: str | os.PathLike[str] | None = None) -> Path:
        """Save under *tag_name* in the tag directory and return the file path."""
        directory = tag_directory(home)
        directory.mkdir(parents=True, exist_ok=True)
        tag_path = directory / f"{tag_name}.tag"
        tag_path.write_bytes(self.to_bytes())
        logger.info(
            "TagData written: path=%s config=%s program=%s args=%s",
            tag_path,
            self.config_file,
            self.program,
            ", ".join(self.program_args),
        )
        return tag_path


def tag_directory(home: str | os.PathLike[str] | None = None) -> Path:
    """Return the tag directory under *home* (the user's home by default)."""
    base = Path.home() if home is None else home
    if not os.fspath(base):
        raise ValueError("home directory is not set")
    return Path(base) / DEFAULT_TAG_DIR


def read_tag_data(tag_name: str, home: str | os.PathLike[str] | None = None) -> TagData:
    """Load the tag saved under *tag_name*."""
    tag_path = tag_directory(home) / f"{tag_name}.tag"
    data = TagData.from_bytes(tag_path.read_bytes())
    logger.info(
        "TagData read: config=%s program=%s args=%s",
        data.config_file,
        data.program,
        " ".join(data.program_args),
    )
    return data


def remove_tag(tag_name: str, home: str | os.PathLike[str] | None = None) -> Path:
    """Delete the tag saved under *tag_name* and return the removed path."""
    tag_path = tag_directory(home) / f"{tag_name}.tag"
    tag_path.unlink()
    return tag_path


def get_files_with_extension(directory: str | os.PathLike[str], ext: str) -> list[str]:
    """List regular files in *directory* whose extension matches *ext*.

    The comparison ignores case; results are sorted by file name.
    """
    with os.scandir(directory) as entries:
        names = sorted(
            entry.name
            for entry in entries
            if entry.is_file(follow_symlinks=False)
            and file_ext(entry.name).casefold() == ext.casefold()
        )
    return [os.path.join(directory, name) for name in names]