"""Unit tests for core/export.py"""

from pathlib import PurePosixPath

import pytest

from mdsite.core.export import clean_output_dir, copy_asset, write_text
from mdsite.errors import ConfigError


def test_write_text_creates_parents(tmp_path):
    assert write_text(tmp_path, PurePosixPath("a/b/c.html"), "<p>x</p>") is True
    assert (tmp_path / "a" / "b" / "c.html").read_text() == "<p>x</p>"


def test_write_text_skips_unchanged(tmp_path):
    write_text(tmp_path, PurePosixPath("x.html"), "same")
    assert write_text(tmp_path, PurePosixPath("x.html"), "same") is False
    assert write_text(tmp_path, PurePosixPath("x.html"), "different") is True
    assert (tmp_path / "x.html").read_text() == "different"


def test_write_text_leaves_no_temp_files(tmp_path):
    write_text(tmp_path, PurePosixPath("x.html"), "data")
    assert [p.name for p in tmp_path.iterdir()] == ["x.html"]


def test_copy_asset_bytes_identical(tmp_path):
    src = tmp_path / "logo.bin"
    src.write_bytes(b"\x00\x01\xff")
    out = tmp_path / "out"
    assert copy_asset(src, out, PurePosixPath("img/logo.bin")) is True
    assert (out / "img" / "logo.bin").read_bytes() == b"\x00\x01\xff"
    assert copy_asset(src, out, PurePosixPath("img/logo.bin")) is False


def test_clean_output_dir_removes(tmp_path):
    out = tmp_path / "_site"
    (out / "old").mkdir(parents=True)
    clean_output_dir(out, tmp_path)
    assert not out.exists()


def test_clean_output_dir_refuses_root(tmp_path):
    with pytest.raises(ConfigError, match="project root"):
        clean_output_dir(tmp_path, tmp_path)


def test_clean_output_dir_refuses_outside(tmp_path):
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    with pytest.raises(ConfigError, match="outside"):
        clean_output_dir(outside, project)
