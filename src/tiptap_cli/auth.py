"""Registry authentication and token storage.

Tokens for the private package registry live in the package manager's own
configuration (``.npmrc``, ``npm config``, ``yarn config`` or ``.yarnrc.yml``)
so package installs pick them up as well.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import httpx
import yaml

from tiptap_cli.errors import AuthError
from tiptap_cli.package_manager import PackageManager
from tiptap_cli.process import CommandFailure, CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

TIPTAP_REGISTRY = "https://registry.tiptap.dev/"
AUTH_TOKEN_KEY = "//registry.tiptap.dev/:_authToken"
SCOPE_REGISTRY_KEY = "@tiptap-pro:registry"
YARN_SCOPE = "tiptap-pro"


def extract_auth_token(config_string: str) -> str | None:
    """Return the registry token from ``.npmrc``-style content."""
    for line in config_string.splitlines():
        if line.startswith(f"{AUTH_TOKEN_KEY}="):
            token = line.split("=", 1)[1].strip()
            return token or None
    return None


def update_npmrc(content: str, token: str) -> str:
    """Set the scope registry and auth token lines, keeping everything else."""
    lines: list[str] = []
    seen: set[str] = set()
    managed = {SCOPE_REGISTRY_KEY: TIPTAP_REGISTRY, AUTH_TOKEN_KEY: token}

    for line in content.split("\n") if content else []:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in line:
            lines.append(line)
            continue

        key = line.split("=", 1)[0].strip()
        if key in managed:
            lines.append(f"{key}={managed[key]}")
            seen.add(key)
        else:
            lines.append(line)

    # Append missing keys before the trailing newline.
    if lines and lines[-1] == "":
        lines.pop()
    for key, value in managed.items():
        if key not in seen:
            lines.append(f"{key}={value}")
    lines.append("")
    return "\n".join(lines)


def remove_npmrc_token(content: str) -> str:
    """Drop the scope registry and auth token lines."""
    kept = [
        line
        for line in content.split("\n")
        if line.split("=", 1)[0].strip() not in (SCOPE_REGISTRY_KEY, AUTH_TOKEN_KEY)
    ]
    return "\n".join(kept)


def save_to_npmrc(npmrc_path: Path, token: str) -> None:
    content = npmrc_path.read_text(encoding="utf-8") if npmrc_path.exists() else ""
    npmrc_path.write_text(update_npmrc(content, token), encoding="utf-8")


def save_yarn_berry_token(token: str, cwd: Path) -> None:
    """Add the ``tiptap-pro`` scope to ``.yarnrc.yml``."""
    yarnrc_path = cwd / ".yarnrc.yml"
    data: dict[str, Any] = {}
    if yarnrc_path.exists():
        try:
            loaded = yaml.safe_load(yarnrc_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.warning(f"Could not parse {yarnrc_path}, rewriting it: {e}")
            loaded = None
        if isinstance(loaded, dict):
            data = loaded

    scopes = data.get("npmScopes")
    if not isinstance(scopes, dict):
        scopes = {}
        data["npmScopes"] = scopes
    scopes[YARN_SCOPE] = {"npmRegistryServer": TIPTAP_REGISTRY, "npmAuthToken": token}

    yarnrc_path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


class TokenStore(Protocol):
    def get_token(self, cwd: Path) -> str | None: ...

    def save_token(self, token: str, cwd: Path) -> None: ...

    def remove_token(self, cwd: Path) -> bool: ...


class PackageManagerTokenStore:
    """Stores the registry token where *package_manager* reads it from."""

    def __init__(
        self,
        package_manager: PackageManager,
        runner: CommandRunner | None = None,
        home: Path | None = None,
    ) -> None:
        self.package_manager = package_manager
        self.runner = runner or SubprocessRunner()
        self.home = home or Path.home()

    def get_token(self, cwd: Path) -> str | None:
        """Look in the project ``.npmrc``, then npm config (npm only) or ``~/.npmrc``."""
        project_npmrc = cwd / ".npmrc"
        if project_npmrc.exists():
            token = extract_auth_token(project_npmrc.read_text(encoding="utf-8"))
            if token:
                return token

        if self.package_manager == PackageManager.NPM:
            try:
                output = self.runner.run(["npm", "config", "get", AUTH_TOKEN_KEY], cwd=cwd)
            except CommandFailure as e:
                logger.debug(f"npm config lookup failed: {e}")
                return None
            value = output.stdout.strip()
            return value if value and value != "undefined" else None

        global_npmrc = self.home / ".npmrc"
        if global_npmrc.exists():
            return extract_auth_token(global_npmrc.read_text(encoding="utf-8"))
        return None

    def save_token(self, token: str, cwd: Path) -> None:
        try:
            match self.package_manager:
                case PackageManager.NPM:
                    self.runner.run(
                        ["npm", "config", "set", SCOPE_REGISTRY_KEY, TIPTAP_REGISTRY], cwd=cwd
                    )
                    self.runner.run(["npm", "config", "set", AUTH_TOKEN_KEY, token], cwd=cwd)
                case PackageManager.YARN:
                    self._save_yarn_token(token, cwd)
                case _:
                    save_to_npmrc(cwd / ".npmrc", token)
        except (CommandFailure, OSError) as e:
            raise AuthError(f"Could not save authentication token: {e}") from e
        logger.debug(f"Saved registry token for {self.package_manager}")

    def _save_yarn_token(self, token: str, cwd: Path) -> None:
        try:
            version = self.runner.run(["yarn", "--version"], cwd=cwd).stdout.strip()
            if version.startswith("1."):
                self.runner.run(
                    ["yarn", "config", "set", SCOPE_REGISTRY_KEY, TIPTAP_REGISTRY], cwd=cwd
                )
                self.runner.run(["yarn", "config", "set", AUTH_TOKEN_KEY, token], cwd=cwd)
            else:
                save_yarn_berry_token(token, cwd)
        except CommandFailure as e:
            logger.debug(f"yarn config failed, falling back to .npmrc: {e}")
            save_to_npmrc(cwd / ".npmrc", token)

    def remove_token(self, cwd: Path) -> bool:
        """Remove the token from the project ``.npmrc``; return whether one was there."""
        npmrc_path = cwd / ".npmrc"
        if not npmrc_path.exists():
            return False
        content = npmrc_path.read_text(encoding="utf-8")
        if extract_auth_token(content) is None:
            return False
        npmrc_path.write_text(remove_npmrc_token(content), encoding="utf-8")
        return True


@dataclass
class AuthStatus:
    authenticated: bool
    user: str | None = None
    plan: str | None = None
    expires: str | None = None
    token: str | None = None


async def authenticate_user(
    email: str,
    password: str,
    registry_url: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Exchange credentials for a registry token."""
    if not email or not password:
        raise AuthError("Invalid credentials")

    url = f"{registry_url.rstrip('/')}/api/auth/login"
    async with httpx.AsyncClient(transport=transport, timeout=None) as client:
        try:
            response = await client.post(url, json={"email": email, "password": password})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AuthError(f"Error {e.response.status_code}: {e.response.reason_phrase}") from e
        except httpx.HTTPError as e:
            raise AuthError(f"Could not reach {url}: {e}") from e

    try:
        token = response.json().get("token")
    except (ValueError, AttributeError) as e:
        raise AuthError(f"Unexpected response from {url}") from e
    if not token:
        raise AuthError(f"No token returned by {url}")
    return str(token)


async def check_auth_status(
    token: str | None,
    registry_url: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuthStatus:
    """Verify *token* with the registry."""
    if not token:
        return AuthStatus(authenticated=False)

    url = f"{registry_url.rstrip('/')}/api/auth/verify"
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    async with httpx.AsyncClient(transport=transport, timeout=None) as client:
        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Auth status check error: {e}")
            return AuthStatus(authenticated=False)

    if not response.is_success:
        return AuthStatus(authenticated=False)

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return AuthStatus(
        authenticated=True,
        user=data.get("email") or data.get("username"),
        plan=data.get("plan"),
        expires=data.get("expires"),
        token=token,
    )
