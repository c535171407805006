"""The manifest of temporary files and the data stored in each of them."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from eec.utils import DEFAULT_MANIFEST_FILE_NAME


@dataclass
class Manifest:
    """One manifest record: a temporary file and the pid that owns it."""

    temp_file_path: str
    eec_pid: int

    def write(self) -> Path:
        """Append this record to the manifest next to the temporary file.

        Returns the manifest path.
        """
        manifest_path = (
            Path(os.fspath(self.temp_file_path)).parent
            / f"{DEFAULT_MANIFEST_FILE_NAME}.txt"
        )
        with manifest_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{self.temp_file_path} {self.eec_pid}\n")
        return manifest_path


@dataclass
class TempData:
    """What a running program leaves in its temporary file."""

    parent_pid: int = 0
    child_pid: int = 0
    config_file: str = ""
    program: str = ""
    program_args: list[str] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        """Encode this record."""
        return json.dumps(asdict(self), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> TempData:
        """Decode a record produced by :meth:`to_bytes`."""
        document = json.loads(data.decode("utf-8"))
        if not isinstance(document, dict):
            raise ValueError("temp data must be an object")
        try:
            record = cls(**document)
        except TypeError as error:
            raise ValueError(f"invalid temp data: {error}") from error
        if not all(isinstance(arg, str) for arg in record.program_args):
            raise ValueError("program_args must be a list of strings")
        return record