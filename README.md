# eec

`eec` starts a program with extra environment variables taken from a TOML
config. You can save a program, its arguments and its config together under a
tag and start it again later by that tag name. A second command,
`eec-deleter`, removes the temp files that `eec run` leaves behind once the
processes that created them have exited.

## Installation

```
pip install .
```

This installs two commands: `eec` and `eec-deleter`. Both write their log
messages to standard output at INFO level.

## Configuration

A config is a TOML document that contains a list of `envs` tables. Each table
has a `key` and a `value`:

```toml
[[envs]]
key = "APP_MODE"
value = "debug"

[[envs]]
key = "APP_HOME"
value = "$(HOME)/app"

[[envs]]
key = "PATH"
value = ["$(HOME)/app/bin", "/opt/tools/bin"]
```

- In a string value, each `$(NAME)` is replaced by the value of the
  environment variable `NAME`. If `NAME` is not set, it is replaced by an
  empty string. Entries are applied in order, so an entry can refer to a
  variable set by an earlier one.
- A list value has each string expanded in the same way. The strings are
  then joined with the platform's path separator, which is `;` on Windows
  and `:` on other systems. If a list element is not a string, it is
  skipped and a warning is logged.
- If the key is `Path` in any letter case, the joined list is appended to the
  `PATH` value that was set before any entry was applied. The result is
  stored under the key exactly as written.
- If an entry has an empty key, or a value that is neither a string nor a
  list, it is skipped and a warning is logged.

The `--config-file` option is handled as follows:

- If it names a file that exists and ends in `.toml`, that file is read.
- If it names a file that exists with any other extension, such as `.yaml`
  or `.json`, the config is empty.
- Otherwise the value itself is treated as inline config text. This text is
  parsed as TOML only when it ends in `.toml`. In all other cases the config
  is empty.

If the config cannot be read or has the wrong shape, an error is logged and
the run continues with an empty config.

From Python, use `eec.config.read_config(path)`,
`eec.config.read_toml(path)` or `eec.config.read_inline_toml(text)` to get a
`Config`. Then call `Config.apply_envs(environ)` to apply it to any mutable
mapping. If you do not pass a mapping, it applies to `os.environ`.

## Running a program

```
eec run --config-file settings.toml --program python --program-args "-c,print('hi')"
```

`--program-args` takes a comma-separated list that follows CSV quoting rules.
You can repeat the option, and each use adds more arguments.

`eec run` does the following:

1. Creates `<eec>_<program>_<uuid>.tmp` in the system temp directory.
2. Reads the config.
3. Adds a line `<temp file> <pid of eec>` to `eec_manifest.txt` in the same
   directory.
4. Applies the config to its own environment. The program inherits this
   environment.
5. Starts the program with standard input, output and error inherited from
   `eec`.
6. Writes the run details to the temp file as JSON: the parent and child
   PIDs, the config, the program and its arguments.
7. Waits for the program to finish.

`eec run` exits with status 1 if the program cannot be started or exits with
a non-zero status. The temp file is not removed. `eec-deleter` removes it.

From Python, `eec.cli.run_program(config_file, program, program_args, tag)`
runs the same steps and returns the temp file path. If the program exits with
a non-zero status, it raises `subprocess.CalledProcessError`.

## Tags

Tags are saved as binary `<name>.tag` files in `~/.eec`.

```
eec tag add dev --config-file settings.toml --program python --program-args "-m,http.server"
eec tag read dev
eec tag list
eec tag remove dev
eec run --tag dev
```

- `tag read` prints the saved config, program and arguments.
- `tag list` prints `-- current tag lists  --`, followed by the full path of
  each `.tag` file sorted by name.
- `tag remove` deletes the tag, prints `Removed tag: <name>` and then prints
  the list.
- `run --tag` uses the saved config, program and arguments in place of the
  command-line options.

The same operations are available in `eec.tags`:

- `TagData.write(name)` to save a tag.
- `read_tag_data(name)` to read one.
- `remove_tag(name)` to delete one.
- `get_files_with_extension(directory, ext)` to list the tag files.

Each of these functions also takes an optional `home` directory.

## Cleaning up temp files

```
eec-deleter
```

`eec-deleter` reads `eec_manifest.txt` from the system temp directory and
handles each line as follows:

1. Waits until the recorded process has exited, checking every 3 seconds.
   On Windows it checks with `tasklist`. On other systems it sends signal 0
   to the process.
2. Deletes the temp file named on that line.

Lines that do not have exactly two fields are skipped.

When every line has been handled, `eec-deleter` deletes the manifest and
exits. If a PID is invalid, or a temp file is missing or cannot be deleted,
the manifest is kept. The whole pass then runs again after 5 seconds. While
the manifest does not exist, `eec-deleter` checks for it every 3 seconds.

## Other commands

```
eec info
```

This prints `version: 0.1-dev`.

## What it does not do

- `eec list` only prints `list called`, and `eec restart` only prints
  `restart called`. Neither lists nor restarts any runs.
- YAML and JSON configs are not supported. They give an empty config.
- `eec-deleter` does not stop retrying on its own. If a manifest line names a
  temp file that no longer exists, it keeps retrying until you remove that
  line or the manifest.