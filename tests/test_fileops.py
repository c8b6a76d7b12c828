"""Tests for themeforge.core.fileops."""

import os
import stat

import pytest

from themeforge.core.fileops import (
    atomic_write_text,
    clean_directory,
    copy_file,
    create_symlink,
    remove_path,
)


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


class TestAtomicWrite:

    def test_creates_parents_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "a" / "b" / "file.conf"
        atomic_write_text(target, "hello\n")
        assert target.read_text() == "hello\n"
        assert [p.name for p in target.parent.iterdir()] == ["file.conf"]

    def test_new_file_gets_default_mode(self, tmp_path):
        target = atomic_write_text(tmp_path / "file.conf", "x")
        assert _mode(target) == 0o644

    def test_existing_mode_is_kept(self, tmp_path):
        target = tmp_path / "script.sh"
        target.write_text("old")
        os.chmod(target, 0o755)
        atomic_write_text(target, "new")
        assert target.read_text() == "new"
        assert _mode(target) == 0o755

    def test_explicit_mode(self, tmp_path):
        target = atomic_write_text(tmp_path / "gtk.css", "x", mode=0o600)
        assert _mode(target) == 0o600

    def test_newlines_are_written_verbatim(self, tmp_path):
        target = atomic_write_text(tmp_path / "crlf.txt", "a\r\nb\n")
        assert target.read_bytes() == b"a\r\nb\n"


class TestLinksAndCopies:

    def test_symlink_replaces_existing_file(self, tmp_path):
        source = tmp_path / "source.css"
        source.write_text("new")
        link = tmp_path / "config" / "style.css"
        link.parent.mkdir()
        link.write_text("old")

        assert create_symlink(source, link) is True
        assert link.is_symlink()
        assert link.read_text() == "new"

    def test_symlink_replaces_existing_link(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.write_text("1")
        second.write_text("2")
        link = tmp_path / "link"
        create_symlink(first, link)
        create_symlink(second, link)
        assert link.read_text() == "2"

    def test_symlink_refuses_to_replace_a_directory(self, tmp_path):
        source = tmp_path / "source.css"
        source.write_text("new")
        existing = tmp_path / "nvim"
        existing.mkdir()
        (existing / "init.lua").write_text("keep")

        with pytest.raises(IsADirectoryError):
            create_symlink(source, existing)

        assert (existing / "init.lua").read_text() == "keep"

    def test_copy_file_replaces_symlink_without_touching_target(self, tmp_path):
        original = tmp_path / "original"
        original.write_text("keep")
        dest = tmp_path / "dest"
        dest.symlink_to(original)
        source = tmp_path / "source"
        source.write_text("copied")

        copy_file(source, dest, mode=0o644)

        assert not dest.is_symlink()
        assert dest.read_text() == "copied"
        assert original.read_text() == "keep"


class TestRemoval:

    def test_remove_path(self, tmp_path):
        file_path = tmp_path / "file"
        file_path.write_text("x")
        directory = tmp_path / "dir"
        (directory / "inner").mkdir(parents=True)

        assert remove_path(file_path) is True
        assert remove_path(directory) is True
        assert remove_path(tmp_path / "missing") is False
        assert list(tmp_path.iterdir()) == []

    def test_remove_symlink_keeps_target_directory(self, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        (target / "keep.txt").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(target)

        remove_path(link)

        assert (target / "keep.txt").exists()

    def test_clean_directory_keeps_the_directory(self, tmp_path):
        theme = tmp_path / "theme"
        (theme / "sub").mkdir(parents=True)
        (theme / "file").write_text("x")
        clean_directory(theme)
        assert theme.is_dir()
        assert list(theme.iterdir()) == []
        clean_directory(tmp_path / "missing")
