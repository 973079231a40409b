"""Default path: patch every ``npm/<key>`` package and publish them with changesets."""

from __future__ import annotations

from pathlib import Path

import yaml

from vary.core.result import Err, Ok, Result
from vary.core.structured import StrDict, as_obj_list, as_str_dict
from vary.output.console import ConsoleProtocol
from vary.platform.files import atomic_write_text
from vary.platform.process import Runner

from .arch import ArchDescriptor, lookup
from .artifacts import LICENSE, README, copy_license
from .commands import REINSTALL, run_command
from .errors import CommandFailed, ConfigError, MissingLicense, MissingToken
from .manifest import (
    MANIFEST_NAME,
    NormalizedNapiConfig,
    RootManifest,
    pick,
    read_json_object,
    write_manifest,
)
from .publish import PublishGate
from .stubs import STUB_GLOB, list_stub_directories

WORKSPACE_FILE = "pnpm-workspace.yaml"

SHARED_KEYS = ("author", "homepage", "repository", "engines", "license", "publishConfig")

SubpackageError = ConfigError | CommandFailed | MissingLicense | MissingToken

# stub dir, its platform, its current package.json
_Planned = tuple[Path, ArchDescriptor, StrDict]


def subpackage_name(config: NormalizedNapiConfig, key: str) -> str:
    return f"{config.package_name}-{key}"


def subpackage_readme(name: str, arch: ArchDescriptor, package: str, repository: str) -> str:
    return f"# `{name}`\n\nThis is the `{arch.description}` binary for [`{package}`]({repository}).\n"


def patch_subpackage_manifest(
    existing: StrDict,
    manifest: RootManifest,
    config: NormalizedNapiConfig,
    arch: ArchDescriptor,
) -> StrDict:
    """Fill in a stub package.json from the root manifest, keeping its other fields."""
    main = f"{config.binary_name}.{arch.key}.node"
    data = dict(existing)
    data["name"] = subpackage_name(config, arch.key)
    data["description"] = f"This is the {arch.description} binary for {manifest.name}."
    data["version"] = manifest.version
    data["main"] = main
    data["files"] = [main]
    data.update(pick(manifest.data, SHARED_KEYS))
    return data


def register_workspace_glob(root: Path, glob: str = STUB_GLOB) -> Result[bool, ConfigError]:
    """Add glob to pnpm-workspace.yaml#packages. Returns False if already listed."""
    path = root / WORKSPACE_FILE
    if not path.is_file():
        return Err(ConfigError(WORKSPACE_FILE, f"{path} not found", hint="Create a pnpm workspace first"))

    try:
        raw: object = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        return Err(ConfigError(WORKSPACE_FILE, f"Invalid YAML in {path}: {e}"))

    data = as_str_dict(raw)
    packages = as_obj_list(data.get("packages")) if data is not None else None
    if data is None or packages is None:
        return Err(ConfigError(f"{WORKSPACE_FILE}#packages", f"{path} must declare a 'packages' list"))

    if glob in packages:
        return Ok(False)
    packages.append(glob)
    atomic_write_text(path, yaml.safe_dump(data, sort_keys=False, width=1000))
    return Ok(True)


def mark_root_private(manifest: RootManifest) -> None:
    data = dict(manifest.data)
    data["private"] = True
    write_manifest(manifest.path, data)


class SubpackageRelease:
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

    def _plan(self) -> Result[list[_Planned], ConfigError | MissingLicense]:
        """Check every stub dir and read its manifest without writing anything."""
        root = self._manifest.root
        license_path = root / LICENSE
        if not license_path.is_file():
            return Err(MissingLicense(path=license_path))

        plan: list[_Planned] = []
        for directory in list_stub_directories(root):
            arch = lookup(directory.name)
            if arch is None:
                return Err(
                    ConfigError(
                        "npm",
                        f"Unknown platform dir: npm/{directory.name}",
                        hint="Remove it or rename it to a supported platform key",
                    )
                )
            existing = read_json_object(directory / MANIFEST_NAME)
            if isinstance(existing, Err):
                return existing
            plan.append((directory, arch, existing.value))
        return Ok(plan)

    def patch(self) -> Result[list[Path], ConfigError | MissingLicense]:
        """Patch every stub directory in place. Returns the patched dirs.

        Nothing is written unless every directory is a known platform with a
        readable package.json.
        """
        planned = self._plan()
        if isinstance(planned, Err):
            return planned

        manifest = self._manifest
        patched: list[Path] = []
        for directory, arch, existing in planned.value:
            licensed = copy_license(manifest.root, directory)
            if isinstance(licensed, Err):
                return licensed

            name = subpackage_name(self._config, arch.key)
            readme = subpackage_readme(
                name, arch, manifest.name or "", manifest.repository_url or ""
            )
            (directory / README).write_text(readme, encoding="utf-8")
            write_manifest(
                directory / MANIFEST_NAME,
                patch_subpackage_manifest(existing, manifest, self._config, arch),
            )
            self._console.success(f"Patched: {name}")
            patched.append(directory)
        return Ok(patched)

    def run(self, *, tag: str | None = None) -> Result[list[Path], SubpackageError]:
        self._console.info("Will release the sub packages.")
        patched = self.patch()
        if isinstance(patched, Err):
            return patched

        registered = register_workspace_glob(self._manifest.root)
        if isinstance(registered, Err):
            return registered
        if registered.value:
            self._console.print(f"Added '{STUB_GLOB}' to {WORKSPACE_FILE}")

        mark_root_private(self._manifest)

        self._console.print("Reinstalling...")
        reinstalled = run_command(self._runner, REINSTALL, cwd=self._manifest.root)
        if isinstance(reinstalled, Err):
            return reinstalled

        published = self._gate.publish(tag=tag)
        if isinstance(published, Err):
            return published
        return Ok(patched.value)
