"""Fixtures for napi release tests: a minimal napi project on disk."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vary.core.config import Settings


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root declaring @scope/demo for linux-x64-gnu and darwin-arm64 (napi CLI 3)."""
    root = tmp_path / "repo"
    root.mkdir()
    write_json(
        root / "package.json",
        {
            "name": "demo",
            "version": "1.2.3",
            "description": "Demo native addon",
            "main": "index.js",
            "types": "index.d.ts",
            "license": "MIT",
            "author": "Demo Author",
            "repository": {"type": "git", "url": "https://github.com/demo/demo"},
            "engines": {"node": ">=18"},
            "files": ["index.js", "index.d.ts"],
            "napi": {
                "binaryName": "demo",
                "packageName": "@scope/demo",
                "targets": ["x86_64-unknown-linux-gnu", "aarch64-apple-darwin"],
            },
            "devDependencies": {"@napi-rs/cli": "^3.0.0"},
        },
    )
    write_json(root / "node_modules" / "@napi-rs" / "cli" / "package.json", {"version": "3.0.4"})
    (root / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    (root / "index.js").write_text("module.exports = {}\n", encoding="utf-8")
    (root / "index.d.ts").write_text("export {}\n", encoding="utf-8")
    (root / "pnpm-workspace.yaml").write_text("packages:\n  - packages/*\n", encoding="utf-8")
    return root


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with a token, an isolated home and no wasm-opt side effects."""
    home = tmp_path / "home"
    home.mkdir()
    return Settings(home=home, npm_token="npm_test", skip_wasm_opt=True, skip_wasm_opt_tips=True)

