"""Typed runtime settings.

All environment-driven knobs are read once at the CLI edge into an immutable
``Settings`` value which is then passed to services explicitly. Tests build
``Settings`` directly instead of mutating ``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    "Settings",
    "NPM_REGISTRY",
    "NPM_REGISTRY_HOST",
    "ENV_NPM_TOKEN",
    "ENV_DEBUG",
    "ENV_SKIP_WASM_OPT",
    "ENV_SKIP_WASM_OPT_TIPS",
    "ENV_SYNC_AGENTS",
]

NPM_REGISTRY = "https://registry.npmjs.com/"
NPM_REGISTRY_HOST = "registry.npmjs.com"

ENV_NPM_TOKEN = "NPM_TOKEN"
ENV_DEBUG = "VARY_DEBUG"
ENV_SKIP_WASM_OPT = "VARY_SKIP_WASM_OPT"
ENV_SKIP_WASM_OPT_TIPS = "VARY_SKIP_WASM_OPT_TIPS"
ENV_SYNC_AGENTS = "VARY_SYNC_AGENTS"

_DEFAULT_SYNC_AGENTS = ("cnpm",)


def _flag(env: Mapping[str, str], key: str) -> bool:
    return bool(env.get(key, "").strip())


def _home_from(env: Mapping[str, str]) -> Path:
    for key in ("HOME", "USERPROFILE"):
        value = env.get(key)
        if value:
            return Path(value)
    return Path.home()


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings.

    Attributes:
        home: User home directory; the npm credential file lives here.
        npm_token: Registry auth token used when ~/.npmrc has none.
        debug: Echo external commands instead of running them.
        skip_wasm_opt: Skip the wasm-opt pass entirely.
        skip_wasm_opt_tips: Skip the Cargo.toml wasm-opt advisory.
        sync_agents: Mirror registries for the sync command (comma separated).
        base_env: Environment inherited by child processes.
    """

    home: Path
    npm_token: str | None = None
    debug: bool = False
    skip_wasm_opt: bool = False
    skip_wasm_opt_tips: bool = False
    sync_agents: tuple[str, ...] = _DEFAULT_SYNC_AGENTS
    base_env: dict[str, str] = field(default_factory=_empty_env)

    @property
    def npmrc_path(self) -> Path:
        return self.home / ".npmrc"

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> Settings:
        """Build settings from an environment mapping."""
        token = env.get(ENV_NPM_TOKEN, "").strip() or None
        agents = tuple(
            a.strip() for a in env.get(ENV_SYNC_AGENTS, "").split(",") if a.strip()
        )
        return cls(
            home=_home_from(env),
            npm_token=token,
            debug=_flag(env, ENV_DEBUG),
            skip_wasm_opt=_flag(env, ENV_SKIP_WASM_OPT),
            skip_wasm_opt_tips=_flag(env, ENV_SKIP_WASM_OPT_TIPS),
            sync_agents=agents or _DEFAULT_SYNC_AGENTS,
            base_env=dict(env),
        )


def load_settings() -> Settings:
    """Read settings from the current process environment."""
    return Settings.from_env(os.environ)
