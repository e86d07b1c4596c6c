"""YAML configuration loader for the back office."""

import asyncio
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

SESSION_TOKEN_ENV = "CAR_ADMIN_SESSION_TOKEN"


class RoutesConfig(BaseModel):
    """Navigation targets handed to the navigator."""

    dashboard: str = "/admin/dashboard"
    login: str = "/admin/login"

    model_config = ConfigDict(frozen=True)


class AdminConfig(BaseModel):
    """Complete back office configuration."""

    routes: RoutesConfig = Field(default_factory=RoutesConfig)
    session_token: str | None = Field(
        None, description="Opaque token; its presence means an operator is signed in"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def session_present(self) -> bool:
        """Whether an admin session exists."""
        return bool(self.session_token)


def _get_default_config_path() -> Path:
    """Get the default config path relative to project root."""
    return Path(__file__).parent.parent.parent / "config" / "admin.yaml"


def _load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Load raw YAML config from path.

    Args:
        path: Path to YAML config file. If None, uses default config/admin.yaml
            and falls back to an empty config when that file is absent.

    Returns:
        Raw config dictionary.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    if path is None:
        path = _get_default_config_path()
        if not path.exists():
            return {}

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return raw_config if raw_config is not None else {}


def load_admin_config(path: Path | None = None) -> AdminConfig:
    """Load and validate the back office configuration.

    The ``CAR_ADMIN_SESSION_TOKEN`` environment variable overrides the
    configured session token.

    Args:
        path: Path to YAML config file. If None, uses default config/admin.yaml.

    Returns:
        Validated AdminConfig instance.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        ValidationError: If config doesn't match expected schema.
    """
    raw_config = _load_raw_config(path)

    routes = RoutesConfig(**(raw_config.get("routes") or {}))
    session_token = os.environ.get(SESSION_TOKEN_ENV) or raw_config.get("session_token")

    return AdminConfig(routes=routes, session_token=session_token)


class ConfigSessionManager:
    """Signs the operator out by clearing the token stored in the config file.

    A token supplied through ``CAR_ADMIN_SESSION_TOKEN`` is not touched; the
    caller has to unset it.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _get_default_config_path()

    async def sign_out(self) -> None:
        await asyncio.to_thread(self._clear_token)

    def _clear_token(self) -> None:
        raw_config = _load_raw_config(self._path) if self._path.exists() else {}
        raw_config["session_token"] = None

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            yaml.safe_dump(raw_config, f, sort_keys=False)
