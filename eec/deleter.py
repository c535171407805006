"""Deletes the temporary files in the manifest once their owning processes end."""

from __future__ import annotations

import argparse
import logging
import os
import re
import subprocess
import sys
import tempfile
import time
from collections.abc import Sequence
from pathlib import Path

from eec.utils import DEFAULT_MANIFEST_FILE_NAME, file_exists

logger = logging.getLogger(__name__)

_PROCESS_POLL_INTERVAL = 3.0
_MISSING_MANIFEST_DELAY = 3.0
_RETRY_DELAY = 5.0
_PID_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


def process_running(pid: int) -> bool:
    """Return True while the process with *pid* exists.

    Raises ValueError for a pid that cannot name a single process.
    """
    if pid <= 0:
        raise ValueError(f"invalid pid {pid}")
    if sys.platform == "win32":
        result = subprocess.run(
            ["tasklist", "/FI", f"PID eq {pid}"],
            capture_output=True,
            text=True,
            check=True,
        )
        return str(pid) in result.stdout
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def wait_for_process_termination(pid: int, interval: float = _PROCESS_POLL_INTERVAL) -> None:
    """Block until the process with *pid* has ended, checking every *interval* seconds."""
    while process_running(pid):
        time.sleep(interval)


def _parse_pid(text: str) -> int | None:
    if not _PID_PATTERN.fullmatch(text):
        return None
    return int(text)


def sweep_manifest(manifest_path: str | os.PathLike[str]) -> bool:
    """Make one pass over the manifest, deleting files whose owners have ended.

    Returns True when every record was handled; the manifest itself is then
    deleted. Raises OSError when the manifest cannot be opened.
    """
    manifest_path = Path(manifest_path)
    deleted_all = True

    with manifest_path.open("r", encoding="utf-8", errors="surrogateescape") as handle:
        for raw_line in handle:
            line = raw_line.rstrip("\r\n")
            parts = line.split()
            if len(parts) != 2:
                logger.error("Invalid line in manifest: %r", line)
                continue

            temp_file_path, pid_text = parts
            pid = _parse_pid(pid_text)
            if not pid:
                logger.error("PID is invalid, skipping: %r", pid_text)
                deleted_all = False
                continue

            try:
                wait_for_process_termination(pid)
            except (OSError, ValueError, subprocess.SubprocessError) as error:
                logger.error("Failed waiting for process %d: %s", pid, error)
                deleted_all = False
                continue

            if not file_exists(temp_file_path):
                logger.error("Temp file does not exist, skipping: %s", temp_file_path)
                deleted_all = False
                continue

            try:
                os.remove(temp_file_path)
            except OSError as error:
                logger.error("Failed to delete temp file %s: %s", temp_file_path, error)
                deleted_all = False
            else:
                logger.info("Deleted temp file: %s", temp_file_path)

    if deleted_all:
        try:
            manifest_path.unlink()
        except OSError as error:
            logger.error("Failed to delete manifest file: %s", error)
        else:
            logger.info("Deleted manifest file: %s", manifest_path)
    return deleted_all


def _configure_logging() -> None:
    package_logger = logging.getLogger("eec")
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.INFO)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eec-deleter",
        description="Delete temporary files listed in the manifest after their processes end.",
    )
    parser.add_argument("-t", "--toggle", action="store_true", help="Unused toggle")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the deleter; returns once the manifest has been cleared."""
    _configure_logging()
    _build_parser().parse_args(argv)
    manifest_path = Path(tempfile.gettempdir()) / f"{DEFAULT_MANIFEST_FILE_NAME}.txt"

    while True:
        if not manifest_path.exists():
            logger.error("%s does not exist, waiting", manifest_path.name)
            time.sleep(_MISSING_MANIFEST_DELAY)
            continue
        try:
            done = sweep_manifest(manifest_path)
        except OSError as error:
            logger.error("Failed to open manifest: %s", error)
            time.sleep(_MISSING_MANIFEST_DELAY)
            continue
        if done:
            return 0
        time.sleep(_RETRY_DELAY)


if __name__ == "__main__":
    sys.exit(main())