from __future__ import annotations

import dataclasses

import pytest

from filekv.codec import json_decode, json_encode
from filekv.config import DEFAULT_OPTIONS, StoreOptions, load_options, options_from_mapping
from filekv.errors import InvalidArgumentError


def test_defaults():
    opts = StoreOptions()
    assert opts.async_write is False
    assert opts.sync_on_write is True
    assert opts.indent == 4
    assert opts.atomic_write is True
    assert opts.encode is json_encode
    assert opts.decode is json_decode


def test_options_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_OPTIONS.indent = 2  # type: ignore[misc]


def test_merge_returns_new_snapshot():
    merged = DEFAULT_OPTIONS.merge(indent=2, async_write=None)
    assert merged.indent == 2
    assert merged.async_write is False
    assert DEFAULT_OPTIONS.indent == 4
    assert DEFAULT_OPTIONS.merge() is DEFAULT_OPTIONS


@pytest.mark.parametrize("indent", [-1, 1.5, "2", True])
def test_bad_indent(indent):
    with pytest.raises(InvalidArgumentError):
        StoreOptions(indent=indent)


def test_codec_must_be_callable():
    with pytest.raises(InvalidArgumentError):
        StoreOptions(encode="json")  # type: ignore[arg-type]


def test_load_without_config_file_gives_defaults(tmp_path):
    assert load_options(tmp_path, environ={}) == DEFAULT_OPTIONS


def test_load_from_toml(tmp_path):
    (tmp_path / "filekv.toml").write_text(
        "[store]\nasync_write = true\nsync_on_write = false\nindent = 2\natomic_write = false\n"
    )
    opts = load_options(tmp_path, environ={})
    assert opts == StoreOptions(async_write=True, sync_on_write=False, indent=2, atomic_write=False)


def test_config_found_in_parent_directory(tmp_path):
    (tmp_path / "filekv.toml").write_text("[store]\nindent = 0\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert load_options(nested, environ={}).indent == 0


def test_env_overrides_file(tmp_path):
    (tmp_path / "filekv.toml").write_text("[store]\nindent = 2\nasync_write = true\n")
    env = {"FILEKV_INDENT": "8", "FILEKV_ASYNC_WRITE": "no", "UNRELATED": "x"}
    opts = load_options(tmp_path, environ=env)
    assert opts.indent == 8
    assert opts.async_write is False


@pytest.mark.parametrize(
    "env",
    [{"FILEKV_SYNC_ON_WRITE": "maybe"}, {"FILEKV_INDENT": "wide"}, {"FILEKV_INDENT": "-3"}],
)
def test_bad_env_values(tmp_path, env):
    with pytest.raises(InvalidArgumentError):
        load_options(tmp_path, environ=env)


def test_unknown_key_in_config(tmp_path):
    (tmp_path / "filekv.toml").write_text("[store]\njson_spaces = 2\n")
    with pytest.raises(InvalidArgumentError):
        load_options(tmp_path, environ={})


def test_invalid_toml(tmp_path):
    (tmp_path / "filekv.toml").write_text("[store\n")
    with pytest.raises(InvalidArgumentError) as info:
        load_options(tmp_path, environ={})
    assert info.value.path == tmp_path / "filekv.toml"


def test_options_from_mapping_accepts_strings():
    opts = options_from_mapping({"async_write": "on", "indent": "3"})
    assert opts.async_write is True
    assert opts.indent == 3
