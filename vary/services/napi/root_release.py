"""``--root``: publish the main package with its platform packages as optional deps."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from vary.core.result import Err, Ok, Result
from vary.core.structured import StrDict, get_path, set_path
from vary.output.console import ConsoleProtocol
from vary.platform.files import recreate_dir
from vary.platform.process import Runner

from .artifacts import LICENSE, README
from .commands import BUILD, run_command
from .errors import CommandFailed, ConfigError, MissingEntryPoint, MissingToken
from .manifest import MANIFEST_NAME, NormalizedNapiConfig, RootManifest, write_manifest
from .publish import PublishGate
from .stubs import list_stub_directories

PUBLISH_DIR = "dist"
ENTRY_POINT = "index.js"

ROOT_PICK_KEYS = (
    "name",
    "version",
    "main",
    "types",
    "description",
    "author",
    "homepage",
    "repository",
    "keywords",
    "license",
    "engines",
    "napi",
)

RootReleaseError = ConfigError | CommandFailed | MissingEntryPoint | MissingToken


def optional_dependencies(package_name: str, version: str, keys: Iterable[str]) -> dict[str, str]:
    return {f"{package_name}-{key}": version for key in keys}


def root_publish_manifest(
    manifest: RootManifest, optional_deps: dict[str, str]
) -> StrDict:
    """The package.json published from ``dist``."""
    data = manifest.pick(ROOT_PICK_KEYS)
    data["optionalDependencies"] = optional_deps

    postinstall = manifest.script("postinstall")
    if postinstall is not None:
        data["scripts"] = {"postinstall": postinstall}

    vary = manifest.vary
    if vary is not None:
        for key in vary.keep_keys:
            value = get_path(manifest.data, key)
            if value is not None:
                set_path(data, key, value)
        data["vary"] = manifest.data["vary"]
    return data


class RootRelease:
    def __init__(
        self,
        *,
        manifest: RootManifest,
        config: NormalizedNapiConfig,
        runner: Runner,
        console: ConsoleProtocol,
        gate: PublishGate,
    ) -> None:
        self._manifest = manifest
        self._config = config
        self._runner = runner
        self._console = console
        self._gate = gate

    @property
    def publish_dir(self) -> Path:
        return self._manifest.root / PUBLISH_DIR

    def run(self, *, tag: str | None = None) -> Result[Path, RootReleaseError]:
        manifest = self._manifest
        root = manifest.root
        self._console.info("Will release the root package.")

        files = manifest.files
        if not files:
            return Err(
                ConfigError("files", "package.json#files is required", hint="e.g. ['index.js']")
            )

        built = run_command(self._runner, BUILD, cwd=root)
        if isinstance(built, Err):
            return built

        version = manifest.version or ""
        keys = [d.name for d in list_stub_directories(root)]
        data = root_publish_manifest(
            manifest, optional_dependencies(self._config.package_name, version, keys)
        )

        publish_dir = recreate_dir(self.publish_dir)
        write_manifest(publish_dir / MANIFEST_NAME, data)

        copied = self._copy_files(root, publish_dir, [LICENSE, README, *files])
        if isinstance(copied, Err):
            return copied

        published = self._gate.publish(tag=tag, directory=publish_dir)
        if isinstance(published, Err):
            return published
        return Ok(publish_dir)

    def _copy_files(
        self, root: Path, publish_dir: Path, files: list[str]
    ) -> Result[None, MissingEntryPoint]:
        for name in files:
            source = root / name
            target = publish_dir / name
            if not source.exists():
                if name == ENTRY_POINT:
                    return Err(MissingEntryPoint(path=source))
                self._console.warning(f"File not found: {source}, skip copy")
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                shutil.copyfile(source, target)
        return Ok(None)
