"""Tests for vary.platform.files module."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from vary.platform.files import atomic_write_text, recreate_dir


class TestAtomicWriteText:
    def test_writes_content(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        atomic_write_text(path, "{}\n")
        assert path.read_text(encoding="utf-8") == "{}\n"

    def test_creates_parent(self, tmp_path: Path) -> None:
        path = tmp_path / "npm" / "linux-x64-gnu" / "package.json"
        atomic_write_text(path, "{}")
        assert path.exists()

    def test_overwrites_and_leaves_no_temp_files(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        atomic_write_text(path, "one")
        atomic_write_text(path, "two")
        assert path.read_text(encoding="utf-8") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["a.txt"]

    def test_keeps_existing_mode(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{}", encoding="utf-8")
        path.chmod(0o640)

        atomic_write_text(path, "{\"name\": \"x\"}")

        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_new_file_follows_umask(self, tmp_path: Path) -> None:
        old = os.umask(0o022)
        try:
            atomic_write_text(tmp_path / "pnpm-workspace.yaml", "packages: []\n")
        finally:
            os.umask(old)

        assert stat.S_IMODE((tmp_path / "pnpm-workspace.yaml").stat().st_mode) == 0o644


class TestRecreateDir:
    def test_creates_missing(self, tmp_path: Path) -> None:
        target = recreate_dir(tmp_path / "target" / "wasm_publish")
        assert target.is_dir()

    def test_empties_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "dist"
        (target / "nested").mkdir(parents=True)
        (target / "stale.js").write_text("x", encoding="utf-8")

        recreate_dir(target)

        assert target.is_dir()
        assert list(target.iterdir()) == []
