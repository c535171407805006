import os
import tomllib

import pytest

from eec.config import (
    Config,
    ConfigError,
    Env,
    read_config,
    read_inline_config,
    read_inline_toml,
    read_toml,
)

TOML_TEXT = """
[[envs]]
key = "FOO"
value = "bar"

[[envs]]
key = "LIST"
value = ["one", "two"]
"""


def test_read_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(TOML_TEXT)
    config = read_toml(path)
    assert config == Config(envs=[Env("FOO", "bar"), Env("LIST", ["one", "two"])])


def test_read_config_dispatches_on_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(TOML_TEXT)
    assert read_config(path) == read_toml(path)


@pytest.mark.parametrize("name", ["config.yaml", "config.yml", "config.json", "config.txt"])
def test_read_config_other_formats_are_empty(tmp_path, name):
    path = tmp_path / name
    path.write_text(TOML_TEXT)
    assert read_config(path) == Config()


def test_read_toml_invalid_raises(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("envs = [")
    with pytest.raises(tomllib.TOMLDecodeError):
        read_toml(path)


def test_read_toml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_toml(tmp_path / "missing.toml")


def test_read_toml_wrong_shape_raises():
    with pytest.raises(ConfigError):
        read_inline_toml('envs = "oops"')
    with pytest.raises(ConfigError):
        read_inline_toml("envs = [1, 2]")


def test_read_inline_toml():
    assert read_inline_toml(TOML_TEXT).envs[0] == Env("FOO", "bar")


def test_read_inline_toml_empty_document():
    assert read_inline_toml("") == Config()


def test_read_inline_config_requires_toml_suffix():
    assert read_inline_config(TOML_TEXT) == Config()
    assert read_inline_config("") == Config()


def test_read_inline_config_with_toml_suffix():
    text = TOML_TEXT + "# config.toml"
    assert read_inline_config(text) == read_inline_toml(text)


def test_apply_string_is_expanded():
    environ = {"PATH": "/usr/bin", "BASE": "/opt"}
    Config(envs=[Env("TARGET", "$(BASE)/tool")]).apply_envs(environ)
    assert environ["TARGET"] == "/opt/tool"


def test_apply_list_joins_with_path_separator():
    environ = {"PATH": "/usr/bin"}
    Config(envs=[Env("LIBS", ["a", "b"])]).apply_envs(environ)
    assert environ["LIBS"] == os.pathsep.join(["a", "b"])


def test_apply_path_list_appends_to_existing_path():
    environ = {"PATH": "/usr/bin"}
    Config(envs=[Env("Path", ["/a", "/b"])]).apply_envs(environ)
    assert environ["Path"] == os.pathsep.join(["/usr/bin", "/a", "/b"])


def test_apply_skips_non_string_elements():
    environ = {"PATH": ""}
    Config(envs=[Env("MIXED", ["x", 3, "y"])]).apply_envs(environ)
    assert environ["MIXED"] == os.pathsep.join(["x", "y"])


def test_apply_skips_empty_keys_and_unsupported_values():
    environ = {"PATH": "/usr/bin"}
    Config(envs=[Env("", "ignored"), Env("NUMBER", 5), Env("NONE", None)]).apply_envs(
        environ
    )
    assert environ == {"PATH": "/usr/bin"}


def test_apply_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("EEC_APPLIED", "old")
    monkeypatch.setenv("EEC_SOURCE", "src")
    config = read_inline_toml(
        '[[envs]]\nkey = "EEC_APPLIED"\nvalue = "$(EEC_SOURCE)/bin"\n'
    )
    assert config.envs == [Env("EEC_APPLIED", "$(EEC_SOURCE)/bin")]
    config.apply_envs()
    assert os.environ["EEC_APPLIED"] == "src/bin"
    assert os.environ["EEC_SOURCE"] == "src"