import os

import pytest

from eec.utils import (
    expand_env_variables,
    expand_env_variables_list,
    file_exists,
    file_ext,
)


def test_expand_known_variable(monkeypatch):
    monkeypatch.setenv("EEC_TEST_VALUE", "hello")
    assert expand_env_variables("x$(EEC_TEST_VALUE)y") == "xhelloy"


def test_expand_unknown_variable_becomes_empty(monkeypatch):
    monkeypatch.delenv("EEC_MISSING_VALUE", raising=False)
    assert expand_env_variables("a$(EEC_MISSING_VALUE)b") == "ab"


def test_expand_multiple_references(monkeypatch):
    monkeypatch.setenv("EEC_ONE", "1")
    monkeypatch.setenv("EEC_TWO", "2")
    assert expand_env_variables("$(EEC_ONE)/$(EEC_TWO)") == "1/2"


@pytest.mark.parametrize("text", ["plain text", "$HOME", "${HOME}", "$()", ""])
def test_text_without_parenthesised_references_is_unchanged(text):
    assert expand_env_variables(text) == text


def test_expand_list_matches_single_expansion(monkeypatch):
    monkeypatch.setenv("EEC_ITEM", "value")
    inputs = ["$(EEC_ITEM)", "none", "pre-$(EEC_ITEM)"]
    assert expand_env_variables_list(inputs) == ["value", "none", "pre-value"]


def test_expand_list_empty():
    assert expand_env_variables_list([]) == []


def test_file_exists(tmp_path):
    target = tmp_path / "present.txt"
    target.write_text("data")
    assert file_exists(target) is True
    assert file_exists(tmp_path) is True
    assert file_exists(tmp_path / "absent.txt") is False


@pytest.mark.parametrize(
    "path, expected",
    [
        ("config.toml", ".toml"),
        ("settings.yaml", ".yaml"),
        ("data.json", ".json"),
        ("noext", ""),
        ("", ""),
    ],
)
def test_file_ext(path, expected):
    assert file_ext(path) == expected


def test_file_ext_uses_last_element_only(tmp_path):
    assert file_ext(os.path.join("dir.toml", "plain")) == ""
    assert file_ext(tmp_path / "a.b.json") == ".json"