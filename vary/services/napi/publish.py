"""Registry auth and the publish gate.

Every upload goes through ``PublishGate.publish``: it first makes sure the
user's ~/.npmrc holds an auth token for the npm registry (creating the line
from NPM_TOKEN if needed), then hands over to ``changeset publish`` (whole
workspace) or ``npm publish`` (one prepared directory).
"""

from __future__ import annotations

import re
from pathlib import Path

from vary.core.config import ENV_NPM_TOKEN, NPM_REGISTRY, NPM_REGISTRY_HOST, Settings
from vary.core.result import Err, Ok, Result
from vary.output.console import ConsoleProtocol
from vary.platform.process import Runner

from .commands import run_command
from .errors import CommandFailed, ConfigError, MissingToken

# https://github.com/npm/cli/blob/8f8f71e4dd5ee66b3b17888faad5a7bf6c657eed/test/lib/adduser.js#L103-L105
_AUTH_LINE = re.compile(
    rf"^\s*//{re.escape(NPM_REGISTRY_HOST)}/:[_-]authToken=",
    re.IGNORECASE,
)


def has_auth_line(content: str) -> bool:
    return any(_AUTH_LINE.match(line) for line in content.splitlines())


def ensure_registry_auth(
    settings: Settings, *, console: ConsoleProtocol
) -> Result[Path, MissingToken | ConfigError]:
    """Make sure ~/.npmrc carries a token for the npm registry."""
    npmrc = settings.npmrc_path
    auth_line = f"//{NPM_REGISTRY_HOST}/:_authToken={settings.npm_token}\n"

    if npmrc.exists():
        console.print("Found existing user .npmrc file")
        try:
            content = npmrc.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(ConfigError(".npmrc", f"Cannot read {npmrc}: {e}"))
        if has_auth_line(content):
            console.print("Found existing auth token for the npm registry in the user .npmrc file")
            return Ok(npmrc)

        console.print(
            "Didn't find existing auth token for the npm registry in the user .npmrc file, "
            "creating one"
        )
        if not settings.npm_token:
            return Err(MissingToken(env_var=ENV_NPM_TOKEN, npmrc=npmrc))
        with npmrc.open("a", encoding="utf-8") as handle:
            handle.write(f"\n{auth_line}")
        return Ok(npmrc)

    console.print("No user .npmrc file found, creating one")
    if not settings.npm_token:
        return Err(MissingToken(env_var=ENV_NPM_TOKEN, npmrc=npmrc))
    npmrc.parent.mkdir(parents=True, exist_ok=True)
    npmrc.write_text(auth_line, encoding="utf-8")
    return Ok(npmrc)


def _tag_args(tag: str | None) -> list[str]:
    return ["--tag", tag] if tag else []


def changeset_publish_command(tag: str | None) -> list[str]:
    return ["changeset", "publish", *_tag_args(tag)]


def npm_publish_command(tag: str | None) -> list[str]:
    return ["npm", "publish", "--registry", NPM_REGISTRY, *_tag_args(tag)]


class PublishGate:
    """Auth check, then delegate to the registry publisher."""

    def __init__(
        self,
        *,
        root: Path,
        settings: Settings,
        runner: Runner,
        console: ConsoleProtocol,
    ) -> None:
        self._root = root
        self._settings = settings
        self._runner = runner
        self._console = console

    def release_only(self, *, tag: str | None = None) -> Result[None, CommandFailed]:
        """``changeset publish`` against the npm registry, no auth check."""
        cmd = changeset_publish_command(tag)
        env = {**self._settings.base_env, "npm_config_registry": NPM_REGISTRY}
        return run_command(self._runner, cmd, cwd=self._root, env=env)

    def publish(
        self, *, tag: str | None = None, directory: Path | None = None
    ) -> Result[None, MissingToken | ConfigError | CommandFailed]:
        """Publish the workspace (directory=None) or one prepared directory."""
        auth = ensure_registry_auth(self._settings, console=self._console)
        if isinstance(auth, Err):
            return auth

        if directory is None:
            return self.release_only(tag=tag)

        cmd = npm_publish_command(tag)
        return run_command(self._runner, cmd, cwd=directory, env=self._settings.base_env)
