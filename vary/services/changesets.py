"""Changesets shortcuts: version, build and publish a pnpm monorepo."""

from __future__ import annotations

from pathlib import Path

from vary.core.config import Settings
from vary.core.result import Err, Ok, Result
from vary.core.structured import get_str, get_table
from vary.output.console import ConsoleProtocol
from vary.platform.process import Runner
from vary.services.napi.commands import run_command
from vary.services.napi.errors import CommandFailed, ConfigError
from vary.services.napi.manifest import MANIFEST_NAME, read_json_object, write_manifest
from vary.services.napi.publish import PublishGate

VERSION_PACKAGES = ["changeset", "version"]
NPM_RUN_BUILD = ["npm", "run", "build"]

DEFAULT_SCRIPTS: dict[str, str] = {
    "push": "vary push",
    "vp": "vary vp",
    "release": "vary release",
    "release:only": "vary release:only",
    "release:quick": "vary release:quick",
    "clean:output": "vary clean:output",
    "build": "pnpm -r --filter ./packages run build",
}

ChangesetsError = ConfigError | CommandFailed


class ChangesetsService:
    def __init__(
        self,
        *,
        root: Path,
        settings: Settings,
        runner: Runner,
        console: ConsoleProtocol,
    ) -> None:
        self._root = root
        self._runner = runner
        self._console = console
        self._gate = PublishGate(root=root, settings=settings, runner=runner, console=console)

    def release_only(self, *, tag: str | None = None) -> Result[None, ChangesetsError]:
        """Publish already-versioned packages to the npm registry."""
        return self._gate.release_only(tag=tag)

    def version_packages(self) -> Result[None, ChangesetsError]:
        return run_command(self._runner, VERSION_PACKAGES, cwd=self._root)

    def release_quick(self, *, tag: str | None = None) -> Result[None, ChangesetsError]:
        versioned = self.version_packages()
        if isinstance(versioned, Err):
            return versioned
        return self.release_only(tag=tag)

    def release(self, *, tag: str | None = None) -> Result[None, ChangesetsError]:
        """Build every package, then publish."""
        loaded = read_json_object(self._root / MANIFEST_NAME)
        if isinstance(loaded, Err):
            return loaded
        scripts = get_table(loaded.value, "scripts") or {}
        if get_str(scripts, "build") is None:
            return Err(
                ConfigError(
                    "scripts.build",
                    "package.json#scripts.build must exist",
                    hint=f"e.g. \"build\": \"{DEFAULT_SCRIPTS['build']}\"",
                )
            )

        built = run_command(self._runner, NPM_RUN_BUILD, cwd=self._root)
        if isinstance(built, Err):
            return built
        return self.release_only(tag=tag)

    def init(self) -> Result[list[str], ConfigError]:
        """Add the shortcut scripts to package.json. Returns the names added."""
        path = self._root / MANIFEST_NAME
        loaded = read_json_object(path)
        if isinstance(loaded, Err):
            return loaded
        data = loaded.value

        scripts = get_table(data, "scripts")
        if scripts is None:
            scripts = {}
            data["scripts"] = scripts

        added: list[str] = []
        for name, script in DEFAULT_SCRIPTS.items():
            if get_str(scripts, name) is not None:
                self._console.warning(f"Command {name} existed")
                continue
            scripts[name] = script
            self._console.success(f"Set {name} command")
            added.append(name)

        write_manifest(path, data, sort=False)
        return Ok(added)
