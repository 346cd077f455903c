"""
Tests for symlink primitives, the mapping table and the dotfile linker.
"""

import json
import os
from pathlib import Path

import pytest

from dotstrap.adapters.shell.filesystem import (
    ensure_symlink,
    read_link,
    remove_if_exists,
    remove_symlink_if_owned,
)
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.models.platform import Platform
from dotstrap.core.services.dotfiles.linker import (
    LINK_STEP,
    UNLINK_STEP,
    link_all,
    link_state,
    unlink_all,
)
from dotstrap.core.services.dotfiles.mappings import get_file_mappings


def _source(tmp_path: Path, name: str = "bashrc") -> Path:
    src = tmp_path / "repo" / "dotfiles" / name
    src.parent.mkdir(parents=True, exist_ok=True)
    src.write_text(f"# {name}\n")
    return src


def _records(settings) -> list[dict]:
    return [json.loads(line) for line in settings.log_file.read_text().splitlines()]


# ── Filesystem primitives ────────────────────────────────────────────


class TestEnsureSymlink:
    def test_creates_link_and_parent(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / "home" / "deep" / "nested" / ".bashrc"
        assert ensure_symlink(src, dst) == "linked"
        assert dst.is_symlink()
        assert os.readlink(dst) == str(src)

    def test_idempotent(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        ensure_symlink(src, dst)
        assert ensure_symlink(src, dst) == "unchanged"
        assert os.readlink(dst) == str(src)

    def test_replaces_foreign_symlink(self, tmp_path):
        src = _source(tmp_path)
        other = _source(tmp_path, "other")
        dst = tmp_path / ".bashrc"
        dst.symlink_to(other)
        assert ensure_symlink(src, dst) == "replaced"
        assert os.readlink(dst) == str(src)

    def test_replaces_regular_file(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        dst.write_text("old contents")
        assert ensure_symlink(src, dst) == "replaced"
        assert dst.is_symlink()

    def test_replaces_dangling_symlink(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        dst.symlink_to(tmp_path / "gone")
        assert ensure_symlink(src, dst) == "replaced"

    def test_never_removes_directory(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / "config"
        dst.mkdir()
        (dst / "keep").write_text("x")
        with pytest.raises(IsADirectoryError):
            ensure_symlink(src, dst)
        assert (dst / "keep").exists()


class TestRemoveSymlinkIfOwned:
    def test_removes_own_link(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        dst.symlink_to(src)
        assert remove_symlink_if_owned(src, dst)
        assert not dst.is_symlink()
        assert src.exists()

    def test_leaves_foreign_link(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        dst.symlink_to(tmp_path / "elsewhere")
        assert not remove_symlink_if_owned(src, dst)
        assert dst.is_symlink()

    def test_leaves_regular_file(self, tmp_path):
        src = _source(tmp_path)
        dst = tmp_path / ".bashrc"
        dst.write_text("mine")
        assert not remove_symlink_if_owned(src, dst)
        assert dst.read_text() == "mine"

    def test_missing_is_noop(self, tmp_path):
        assert not remove_symlink_if_owned(_source(tmp_path), tmp_path / "absent")


class TestSmallHelpers:
    def test_read_link_on_regular_file(self, tmp_path):
        f = tmp_path / "f"
        f.write_text("")
        assert read_link(f) is None

    def test_remove_if_exists(self, tmp_path):
        f = tmp_path / "f"
        f.write_text("")
        assert remove_if_exists(f)
        assert not remove_if_exists(f)


# ── Mapping table ────────────────────────────────────────────────────


class TestFileMappings:
    def test_linux_table(self, settings):
        mappings = get_file_mappings(settings, Platform.UBUNTU)
        assert len(mappings) == 11
        dests = {m.destination for m in mappings}
        assert settings.home / ".bashrc" in dests
        assert settings.config_home / "fish" / "config.fish" in dests
        assert settings.config_home / "zed" / "keymap.json" in dests
        assert all(m.source.is_relative_to(settings.dotfiles_dir) for m in mappings)

    def test_mac_adds_ghostty_application_support(self, settings):
        mappings = get_file_mappings(settings, Platform.MAC)
        assert len(mappings) == 13
        support = settings.home / "Library" / "Application Support"
        ghostty = [m for m in mappings if m.source == settings.dotfiles_dir / "ghostty" / "config"]
        assert {m.destination for m in ghostty} == {
            settings.config_home / "ghostty" / "config",
            support / "Ghostty" / "config",
            support / "com.mitchellh.ghostty" / "config",
        }

    def test_xdg_config_home_respected(self, settings, tmp_path):
        custom = settings.model_copy(update={"config_home": tmp_path / "xdg"})
        mappings = get_file_mappings(custom, Platform.FEDORA)
        assert (tmp_path / "xdg" / "starship.toml") in {m.destination for m in mappings}

    def test_relative_paths_rejected(self):
        with pytest.raises(ValueError):
            FileMapping(source=Path("dotfiles/bashrc"), destination=Path("/home/u/.bashrc"))


# ── Linker ───────────────────────────────────────────────────────────


class TestLinker:
    def _mappings(self, tmp_path, settings):
        return [
            FileMapping(source=_source(tmp_path, "bashrc"), destination=settings.home / ".bashrc"),
            FileMapping(
                source=_source(tmp_path, "starship.toml"),
                destination=settings.config_home / "starship.toml",
            ),
        ]

    def test_link_twice_is_idempotent(self, tmp_path, settings, step_log):
        mappings = self._mappings(tmp_path, settings)
        first = link_all(mappings, step_log)
        second = link_all(mappings, step_log)
        assert first.count("linked") == 2
        assert second.count("unchanged") == 2
        assert all(link_state(m) == "linked" for m in mappings)

    def test_link_logs_paired_step(self, tmp_path, settings, step_log):
        link_all(self._mappings(tmp_path, settings), step_log)
        records = [r for r in _records(settings) if r.get("step") == LINK_STEP]
        assert records[0]["ev"] == "step_begin"
        assert records[-1]["ev"] == "step_end"
        assert records[-1]["ok"] is True
        assert sum(1 for r in records if r["lvl"] == "DEBUG") == 2

    def test_unlink_only_removes_own_links(self, tmp_path, settings, step_log):
        mappings = self._mappings(tmp_path, settings)
        link_all(mappings, step_log)
        # user replaced one link with a real file
        mappings[1].destination.unlink()
        mappings[1].destination.write_text("user owned")

        report = unlink_all(mappings, step_log)
        assert [o.action for o in report.outcomes] == ["removed", "skipped"]
        assert not mappings[0].destination.exists()
        assert mappings[1].destination.read_text() == "user owned"

    def test_link_failure_is_logged_and_raised(self, tmp_path, settings, step_log):
        mapping = FileMapping(source=_source(tmp_path), destination=settings.home / "dir")
        mapping.destination.mkdir()
        with pytest.raises(IsADirectoryError):
            link_all([mapping], step_log)
        end = [r for r in _records(settings) if r["ev"] == "step_end"][-1]
        assert end["ok"] is False
        assert "IsADirectoryError" in end["error"]

    def test_unlink_step_name(self, tmp_path, settings, step_log):
        report = unlink_all(self._mappings(tmp_path, settings), step_log)
        assert report.step == UNLINK_STEP
        assert report.count("skipped") == 2

    def test_link_state_values(self, tmp_path, settings):
        mapping = self._mappings(tmp_path, settings)[0]
        assert link_state(mapping) == "missing"
        mapping.destination.write_text("x")
        assert link_state(mapping) == "file"
        mapping.destination.unlink()
        mapping.destination.symlink_to(tmp_path)
        assert link_state(mapping) == "foreign"
