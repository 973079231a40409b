"""package.json access, napi config normalization and manifest output.

The root ``package.json`` is untrusted input. Every field the release
pipeline consumes is read through ``RootManifest`` accessors, and the two
napi config shapes (napi CLI 2.x and 3.x) are reconciled once into a
``NormalizedNapiConfig`` that the rest of the pipeline uses exclusively.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from vary.core.result import Err, Ok, Result
from vary.core.structured import (
    StrDict,
    as_str_dict,
    get_path,
    get_str,
    get_str_list,
    get_table,
)
from vary.platform.files import atomic_write_text

from .arch import ARCHITECTURES, all_target_triples
from .errors import ConfigError, UnsupportedTargets, UnsupportedToolVersion

NAPI_CLI = "@napi-rs/cli"
WASM_RUNTIME = "@napi-rs/wasm-runtime"
MANIFEST_NAME = "package.json"

# Conventional package.json key order (sort-package-json).
_KEY_ORDER = (
    "$schema",
    "name",
    "displayName",
    "version",
    "private",
    "description",
    "categories",
    "keywords",
    "homepage",
    "bugs",
    "repository",
    "funding",
    "license",
    "author",
    "maintainers",
    "contributors",
    "sideEffects",
    "type",
    "imports",
    "exports",
    "main",
    "module",
    "browser",
    "types",
    "typesVersions",
    "typings",
    "bin",
    "man",
    "directories",
    "files",
    "workspaces",
    "binary",
    "scripts",
    "config",
    "dependencies",
    "devDependencies",
    "dependenciesMeta",
    "peerDependencies",
    "peerDependenciesMeta",
    "optionalDependencies",
    "bundledDependencies",
    "bundleDependencies",
    "packageManager",
    "engines",
    "os",
    "cpu",
    "preferGlobal",
    "publishConfig",
)
_KEY_RANK = {key: i for i, key in enumerate(_KEY_ORDER)}


@dataclass(frozen=True, slots=True)
class VaryConfig:
    """The ``vary`` block of package.json."""

    keep_keys: tuple[str, ...] = ()
    wasm_name: str | None = None
    wasm_web_name: str | None = None


@dataclass(frozen=True, slots=True)
class NormalizedNapiConfig:
    binary_name: str
    package_name: str
    targets: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RootManifest:
    """Parsed root package.json."""

    path: Path
    data: StrDict

    @property
    def root(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str | None:
        return get_str(self.data, "name")

    @property
    def version(self) -> str | None:
        return get_str(self.data, "version")

    @property
    def main(self) -> str | None:
        return get_str(self.data, "main")

    @property
    def repository_url(self) -> str | None:
        value = get_path(self.data, "repository.url")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @property
    def files(self) -> list[str]:
        return get_str_list(self.data, "files") or []

    def script(self, name: str) -> str | None:
        scripts = get_table(self.data, "scripts") or {}
        return get_str(scripts, name)

    def dependency(self, name: str) -> str | None:
        """Declared version range of name in dependencies or devDependencies."""
        deps: StrDict = {
            **(get_table(self.data, "dependencies") or {}),
            **(get_table(self.data, "devDependencies") or {}),
        }
        return get_str(deps, name)

    @property
    def napi(self) -> StrDict | None:
        return get_table(self.data, "napi")

    @property
    def vary(self) -> VaryConfig | None:
        block = get_table(self.data, "vary")
        if block is None:
            return None
        return VaryConfig(
            keep_keys=tuple(get_str_list(block, "keepKeys") or ()),
            wasm_name=get_str(block, "wasmName"),
            wasm_web_name=get_str(block, "wasmWebName"),
        )

    def pick(self, keys: Iterable[str]) -> StrDict:
        return pick(self.data, keys)


def pick(data: Mapping[str, object], keys: Iterable[str]) -> StrDict:
    """Copy the listed top-level keys that are present."""
    return {key: data[key] for key in keys if key in data}


def read_json_object(path: Path) -> Result[StrDict, ConfigError]:
    try:
        raw: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(path.name, f"{path} not found"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(path.name, f"Cannot read {path}: {e}"))
    except json.JSONDecodeError as e:
        return Err(ConfigError(path.name, f"Invalid JSON in {path}: {e}"))

    data = as_str_dict(raw)
    if data is None:
        return Err(ConfigError(path.name, f"{path} must contain a JSON object"))
    return Ok(data)


def load_root_manifest(root: Path) -> Result[RootManifest, ConfigError]:
    path = root / MANIFEST_NAME
    result = read_json_object(path)
    if isinstance(result, Err):
        return result
    return Ok(RootManifest(path=path, data=result.value))


def sort_manifest(data: Mapping[str, object]) -> StrDict:
    """Order keys the way package.json files are conventionally laid out.

    Unknown keys keep their relative order after the known ones; private
    keys (leading underscore) go last.
    """
    keys = list(data)

    def rank(item: tuple[int, str]) -> tuple[int, int]:
        index, key = item
        if key in _KEY_RANK:
            return (0, _KEY_RANK[key])
        if key.startswith("_"):
            return (2, index)
        return (1, index)

    ordered = sorted(enumerate(keys), key=rank)
    return {key: data[key] for _, key in ordered}


def write_manifest(path: Path, data: Mapping[str, object], *, sort: bool = True) -> None:
    content = json.dumps(sort_manifest(data) if sort else dict(data), indent=2, ensure_ascii=False)
    atomic_write_text(path, f"{content}\n")


def require_release_fields(manifest: RootManifest) -> Result[None, ConfigError]:
    if manifest.name is None:
        return Err(ConfigError("name", "package.json#name is required"))
    if manifest.version is None:
        return Err(ConfigError("version", "package.json#version is required"))
    if manifest.repository_url is None:
        return Err(
            ConfigError(
                "repository.url",
                "package.json#repository.url is required",
                hint="e.g. https://github.com/user/repo",
            )
        )
    return Ok(None)


def detect_napi_cli_version(manifest: RootManifest) -> Result[str, ConfigError]:
    """Version of the installed @napi-rs/cli, resolved like node's require."""
    if manifest.dependency(NAPI_CLI) is None:
        return Err(
            ConfigError(
                "devDependencies",
                f"Cannot find {NAPI_CLI} in root package.json",
                hint=f"pnpm add -D {NAPI_CLI}",
            )
        )

    root = manifest.root.resolve()
    for base in (root, *root.parents):
        candidate = base / "node_modules" / NAPI_CLI / MANIFEST_NAME
        if not candidate.is_file():
            continue
        result = read_json_object(candidate)
        if isinstance(result, Err):
            return result
        version = get_str(result.value, "version")
        if version is None:
            return Err(ConfigError("version", f"{candidate} has no version"))
        return Ok(version)

    return Err(
        ConfigError(
            "devDependencies",
            f"{NAPI_CLI} is declared but not installed",
            hint="Run: pnpm install",
        )
    )


def _missing(field: str) -> ConfigError:
    return ConfigError(f"napi.{field}", f"package.json#napi.{field} is required")


def _normalize_v2(napi: StrDict) -> Result[NormalizedNapiConfig, ConfigError]:
    triples = get_table(napi, "triples") or {}
    additional = get_str_list(triples, "additional") or []
    if triples.get("defaults") is not False or not additional:
        return Err(
            ConfigError(
                "napi.triples.defaults",
                "package.json#napi.triples.defaults must be false, "
                "and manually config all platforms",
                hint="List every target in napi.triples.additional",
            )
        )

    binary_name = get_str(napi, "name")
    if binary_name is None:
        return Err(_missing("name"))
    package_name = get_str(get_table(napi, "package") or {}, "name")
    if package_name is None:
        return Err(_missing("package.name"))
    return Ok(NormalizedNapiConfig(binary_name, package_name, tuple(additional)))


def _normalize_v3(napi: StrDict) -> Result[NormalizedNapiConfig, ConfigError]:
    targets = get_str_list(napi, "targets") or []
    if not targets:
        return Err(
            ConfigError("napi.targets", "package.json#napi.targets is required and not empty")
        )

    binary_name = get_str(napi, "binaryName")
    if binary_name is None:
        return Err(_missing("binaryName"))
    package_name = get_str(napi, "packageName")
    if package_name is None:
        return Err(_missing("packageName"))
    return Ok(NormalizedNapiConfig(binary_name, package_name, tuple(targets)))


def normalize_napi_config(
    manifest: RootManifest, tool_version: str
) -> Result[NormalizedNapiConfig, ConfigError | UnsupportedToolVersion]:
    """Reconcile the napi block into one shape based on the napi CLI major version."""
    napi = manifest.napi
    if napi is None:
        return Err(ConfigError("napi", "package.json#napi is required"))

    major = tool_version.strip().lstrip("v").split(".", 1)[0]
    if major == "2":
        return _normalize_v2(napi)
    if major == "3":
        return _normalize_v3(napi)
    return Err(UnsupportedToolVersion(tool=NAPI_CLI, version=tool_version))


def validate_targets(targets: Iterable[str]) -> Result[tuple[str, ...], UnsupportedTargets]:
    supported = all_target_triples()
    wanted = tuple(targets)
    unknown = tuple(t for t in wanted if t not in supported)
    if unknown:
        return Err(
            UnsupportedTargets(
                unknown=unknown,
                supported=tuple(a.target for a in ARCHITECTURES),
            )
        )
    return Ok(wanted)
