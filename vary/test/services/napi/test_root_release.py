"""Tests for the --root release mode."""

from __future__ import annotations

import json
from pathlib import Path

from vary.core.config import Settings
from vary.core.result import Err, Ok
from vary.output.console import MockConsole
from vary.platform.process import MockRunner
from vary.services.napi.errors import CommandFailed, ConfigError, MissingEntryPoint
from vary.services.napi.manifest import NormalizedNapiConfig, RootManifest, load_root_manifest
from vary.services.napi.publish import PublishGate
from vary.services.napi.root_release import (
    RootRelease,
    optional_dependencies,
    root_publish_manifest,
)

CONFIG = NormalizedNapiConfig("demo", "@scope/demo", ("x86_64-unknown-linux-gnu",))


def _load(root: Path) -> RootManifest:
    result = load_root_manifest(root)
    assert isinstance(result, Ok)
    return result.value


def _update(root: Path, **fields: object) -> None:
    path = root / "package.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    data.update(fields)
    path.write_text(json.dumps(data), encoding="utf-8")


def _release(root: Path, settings: Settings, runner: MockRunner) -> RootRelease:
    console = MockConsole()
    return RootRelease(
        manifest=_load(root),
        config=CONFIG,
        runner=runner,
        console=console,
        gate=PublishGate(root=root, settings=settings, runner=runner, console=console),
    )


class TestRootPublishManifest:
    def test_optional_dependencies(self) -> None:
        deps = optional_dependencies("@scope/demo", "1.0.0", ["darwin-arm64", "linux-x64-gnu"])
        assert deps == {"@scope/demo-darwin-arm64": "1.0.0", "@scope/demo-linux-x64-gnu": "1.0.0"}

    def test_picks_fields(self, project: Path) -> None:
        data = root_publish_manifest(_load(project), {})

        assert data["name"] == "demo"
        assert data["version"] == "1.2.3"
        assert data["napi"] == {
            "binaryName": "demo",
            "packageName": "@scope/demo",
            "targets": ["x86_64-unknown-linux-gnu", "aarch64-apple-darwin"],
        }
        assert "files" not in data
        assert "devDependencies" not in data
        assert "scripts" not in data

    def test_postinstall_only(self, project: Path) -> None:
        _update(project, scripts={"postinstall": "node postinstall.js", "test": "vitest"})
        data = root_publish_manifest(_load(project), {})
        assert data["scripts"] == {"postinstall": "node postinstall.js"}

    def test_keep_keys(self, project: Path) -> None:
        """Dotted keepKeys copy nested values; the vary block itself is kept."""
        vary = {"keepKeys": ["exports.node", "bin", "missing.key"]}
        _update(
            project,
            vary=vary,
            exports={"node": "./index.js", "browser": "./browser.js"},
            bin={"demo": "cli.js"},
        )

        data = root_publish_manifest(_load(project), {})

        assert data["exports"] == {"node": "./index.js"}
        assert data["bin"] == {"demo": "cli.js"}
        assert "missing" not in data
        assert data["vary"] == vary


class TestRootRelease:
    def test_empty_files_fails_before_dist(self, project: Path, settings: Settings) -> None:
        """An empty files list fails before building or creating dist."""
        _update(project, files=[])
        (project / "dist").mkdir()
        (project / "dist" / "old.js").write_text("", encoding="utf-8")
        runner = MockRunner()

        result = _release(project, settings, runner).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert result.error.field == "files"
        assert runner.commands == []
        assert (project / "dist" / "old.js").exists()

    def test_full_release(self, project: Path, settings: Settings) -> None:
        for key in ("linux-x64-gnu", "darwin-arm64"):
            (project / "npm" / key).mkdir(parents=True)
        runner = MockRunner()

        result = _release(project, settings, runner).run(tag="next")

        assert result == Ok(project / "dist")
        dist = project / "dist"
        assert runner.commands == [
            ["pnpm", "build"],
            ["npm", "publish", "--registry", "https://registry.npmjs.com/", "--tag", "next"],
        ]
        assert runner.calls[1].cwd == dist
        manifest = json.loads((dist / "package.json").read_text(encoding="utf-8"))
        assert manifest["optionalDependencies"] == {
            "@scope/demo-darwin-arm64": "1.2.3",
            "@scope/demo-linux-x64-gnu": "1.2.3",
        }
        assert sorted(p.name for p in dist.iterdir()) == [
            "LICENSE",
            "README.md",
            "index.d.ts",
            "index.js",
            "package.json",
        ]

    def test_dist_recreated(self, project: Path, settings: Settings) -> None:
        (project / "dist").mkdir()
        (project / "dist" / "stale.txt").write_text("", encoding="utf-8")

        _release(project, settings, MockRunner()).run()

        assert not (project / "dist" / "stale.txt").exists()

    def test_missing_optional_file_warns(self, project: Path, settings: Settings) -> None:
        (project / "index.d.ts").unlink()
        release = _release(project, settings, MockRunner())

        result = release.run()

        assert isinstance(result, Ok)
        assert not (project / "dist" / "index.d.ts").exists()

    def test_missing_entry_point(self, project: Path, settings: Settings) -> None:
        (project / "index.js").unlink()
        runner = MockRunner()

        result = _release(project, settings, runner).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, MissingEntryPoint)
        assert ["npm", "publish", "--registry", "https://registry.npmjs.com/"] not in runner.commands

    def test_build_failure_stops(self, project: Path, settings: Settings) -> None:
        runner = MockRunner()
        runner.fail(["pnpm", "build"])

        result = _release(project, settings, runner).run()

        assert isinstance(result, Err)
        assert isinstance(result.error, CommandFailed)
        assert not (project / "dist").exists()
        assert len(runner.commands) == 1
