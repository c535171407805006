"""Command-line interface: run programs with configured environments and manage tags."""

from __future__ import annotations

import argparse
import csv
import functools
import logging
import os
import subprocess
import sys
import tempfile
import uuid
from collections.abc import Iterable, Sequence
from pathlib import Path

from eec.config import Config, read_config, read_inline_config
from eec.manifest import Manifest, TempData
from eec.tags import (
    TagData,
    get_files_with_extension,
    read_tag_data,
    remove_tag,
    tag_directory,
)
from eec.utils import VERSION, file_exists, file_ext

logger = logging.getLogger(__name__)

_TAG_EXTENSION = ".tag"


class _StdoutHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stdout``."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        if self.stream is not sys.stdout:
            self.stream = sys.stdout
        super().emit(record)


def _configure_logging() -> None:
    package_logger = logging.getLogger("eec")
    if not any(isinstance(h, _StdoutHandler) for h in package_logger.handlers):
        handler = _StdoutHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.INFO)


def remove_extension(filename: str) -> str:
    """Return *filename* without the extension of its last path element."""
    ext = file_ext(filename)
    return filename[: len(filename) - len(ext)] if ext else filename


def _string_slice(values: Iterable[str] | None) -> list[str]:
    """Split comma-separated (CSV-quoted) flag values, repeated flags appending."""
    result: list[str] = []
    for value in values or ():
        if value:
            result.extend(next(csv.reader([value])))
    return result


def _load_config(config_file: str) -> Config:
    try:
        if config_file and file_exists(config_file):
            return read_config(config_file)
        return read_inline_config(config_file)
    except (OSError, ValueError) as error:
        logger.error("failed to read config %r: %s", config_file, error)
        return Config()


def run_program(
    config_file: str = "",
    program: str = "",
    program_args: Sequence[str] = (),
    tag: str = "",
) -> Path:
    """Run *program* with the configured environment and wait for it.

    A non-empty *tag* takes its settings from the saved tag instead of the
    arguments. A temporary file describing the run is created, recorded in
    the manifest and left for the deleter. Returns the temporary file path.
    Raises ``subprocess.CalledProcessError`` if the program exits non-zero.
    """
    if tag:
        tag_data = read_tag_data(tag)
        config_file = tag_data.config_file
        program = tag_data.program
        args = list(tag_data.program_args)
    else:
        args = list(program_args)

    self_program = sys.argv[0] if sys.argv and sys.argv[0] else "eec"
    temp_name = "{}_{}_{}.tmp".format(
        remove_extension(os.path.basename(self_program)),
        remove_extension(os.path.basename(program)),
        uuid.uuid4(),
    )
    temp_path = Path(tempfile.gettempdir()) / temp_name

    with temp_path.open("wb") as temp_file:
        logger.info("Created temp file: %s", temp_path)

        config = _load_config(config_file)

        manifest_path = Manifest(temp_file_path=str(temp_path), eec_pid=os.getpid()).write()
        logger.info("Created manifest file: %s", manifest_path)

        config.apply_envs()

        process = subprocess.Popen([program, *args])
        logger.info("Sub process started: pid=%d", process.pid)

        temp_data = TempData(
            parent_pid=os.getpid(),
            child_pid=process.pid,
            config_file=config_file,
            program=program,
            program_args=args,
        )
        temp_file.write(temp_data.to_bytes())
        temp_file.flush()
        logger.info(
            "Temp file written: parent=%d child=%d config=%s program=%s args=%s",
            temp_data.parent_pid,
            temp_data.child_pid,
            temp_data.config_file,
            temp_data.program,
            ", ".join(temp_data.program_args),
        )

        returncode = process.wait()

    if returncode != 0:
        raise subprocess.CalledProcessError(returncode, [program, *args])
    return temp_path


def _announce(message: str, _args: argparse.Namespace) -> int:
    """Write *message* as one line to standard output."""
    sys.stdout.write(f"{message}\n")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        run_program(
            args.config_file,
            args.program,
            _string_slice(args.program_args),
            args.tag,
        )
    except subprocess.CalledProcessError as error:
        logger.error("program exited with an error: %s", error)
        return 1
    except (OSError, ValueError) as error:
        logger.error("failed to run program: %s", error)
        return 1
    return 0


def _print_tag_list(directory: Path) -> int:
    try:
        files = get_files_with_extension(directory, _TAG_EXTENSION)
    except OSError as error:
        logger.error("no tag files found: %s", error)
        return 1
    print("-- current tag lists  --")
    print("\n".join(files))
    return 0


def _cmd_tag_add(args: argparse.Namespace) -> int:
    data = TagData(
        config_file=args.config_file,
        program=args.program,
        program_args=_string_slice(args.program_args),
    )
    try:
        data.write(args.name)
    except (OSError, ValueError) as error:
        logger.error("failed to write tag file: %s", error)
        return 1
    print("Tag added:", args.name)
    return 0


def _cmd_tag_read(args: argparse.Namespace) -> int:
    try:
        data = read_tag_data(args.name)
    except (OSError, ValueError) as error:
        logger.error("failed to read tag file: %s", error)
        return 1
    print(
        f"Tag: {args.name}\n"
        f"  Config: {data.config_file}\n"
        f"  Program: {data.program}\n"
        f"  Args: [{' '.join(data.program_args)}]"
    )
    return 0


def _cmd_tag_list(_args: argparse.Namespace) -> int:
    try:
        directory = tag_directory()
    except (RuntimeError, ValueError) as error:
        logger.error("home directory is not set: %s", error)
        return 1
    return _print_tag_list(directory)


def _cmd_tag_remove(args: argparse.Namespace) -> int:
    try:
        directory = tag_directory()
        remove_tag(args.name)
    except (OSError, RuntimeError, ValueError) as error:
        logger.error("failed to remove tag %s: %s", args.name, error)
        return 1
    print(f"Removed tag: {args.name}")
    return _print_tag_list(directory)


def _show_help(parser: argparse.ArgumentParser, _args: argparse.Namespace) -> int:
    parser.print_help()
    return 0


def _add_run_settings(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config-file", default="", help="Config file")
    parser.add_argument("--program", default="", help="Program name")
    parser.add_argument(
        "--program-args",
        action="append",
        default=[],
        help="Program args (comma separated, may be repeated)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``eec`` command."""
    parser = argparse.ArgumentParser(
        prog="eec",
        description="Run programs with environments taken from configuration files and saved tags.",
    )
    parser.add_argument("-t", "--toggle", action="store_true", help="Unused toggle")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("info", help="Show version information").set_defaults(
        handler=functools.partial(_announce, f"version: {VERSION}")
    )
    commands.add_parser("list", help="List runs").set_defaults(
        handler=functools.partial(_announce, "list called")
    )
    commands.add_parser("restart", help="Restart a run").set_defaults(
        handler=functools.partial(_announce, "restart called")
    )

    run = commands.add_parser("run", help="Run a program with a configured environment")
    _add_run_settings(run)
    run.add_argument("--tag", default="", help="Tag name")
    run.set_defaults(handler=_cmd_run)

    tag = commands.add_parser("tag", help="Manage tags")
    tag.set_defaults(handler=functools.partial(_show_help, tag))
    tag_commands = tag.add_subparsers(dest="tag_command")

    add = tag_commands.add_parser("add", help="Add a new tag")
    add.add_argument("name")
    _add_run_settings(add)
    add.set_defaults(handler=_cmd_tag_add)

    read = tag_commands.add_parser("read", help="Read a tag")
    read.add_argument("name")
    read.set_defaults(handler=_cmd_tag_read)

    tag_commands.add_parser("list", help="List tags").set_defaults(handler=_cmd_tag_list)

    remove = tag_commands.add_parser("remove", help="Remove a tag")
    remove.add_argument("name")
    remove.set_defaults(handler=_cmd_tag_remove)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``eec`` command; returns the exit status."""
    _configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())