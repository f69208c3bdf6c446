"""Client configuration: server URL, token, current project.

Values are layered, lowest precedence first: the YAML/JSON config file,
``MCAPP_*`` environment variables, then explicit CLI overrides.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from mcapp.exceptions import ConfigError

ENV_PREFIX: str = "MCAPP_"
_KEYS: tuple[str, ...] = ("url", "token", "project", "cacert", "timeout")


def default_config_path() -> Path:
    return Path.home() / ".mcapp" / "config.yaml"


@dataclass(frozen=True)
class ClientConfig:
    url: str = ""
    token: str = ""
    project: str = ""
    """Current project ID, the default install target."""

    cacert: str = ""
    """Optional CA bundle path used to verify the server certificate."""

    timeout: float = 30.0
    """HTTP timeout in seconds."""

    def require_server(self) -> None:
        """Raise :class:`ConfigError` unless a URL and token are set."""
        if not self.url:
            raise ConfigError(
                "No server URL configured.",
                hint="Pass --server-url, set MCAPP_URL, or add 'url' to the config file.",
            )
        if not self.token:
            raise ConfigError(
                "No API token configured.",
                hint="Pass --token, set MCAPP_TOKEN, or add 'token' to the config file.",
            )


def _read_file(path: Path) -> dict[str, str]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML/JSON: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return {str(k): str(v) for k, v in raw.items() if v is not None}


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, str | None] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientConfig:
    """Build a :class:`ClientConfig` from file, environment and overrides.

    A missing file at the default location is not an error; a missing
    file that was asked for explicitly is.
    """
    env = os.environ if environ is None else environ
    explicit = path is not None or bool(env.get(f"{ENV_PREFIX}CONFIG"))
    config_path = path or Path(env.get(f"{ENV_PREFIX}CONFIG") or default_config_path())

    values: dict[str, str] = {}
    if config_path.is_file():
        values.update(_read_file(config_path))
    elif explicit:
        raise ConfigError(f"Config file {config_path} does not exist")

    for key in _KEYS:
        env_value = env.get(f"{ENV_PREFIX}{key.upper()}")
        if env_value:
            values[key] = env_value
    for key, value in (overrides or {}).items():
        if value:
            values[key] = value

    timeout = values.get("timeout", "30")
    try:
        timeout_s = float(timeout)
    except ValueError as exc:
        raise ConfigError(f"Invalid timeout in config: {timeout!r}") from exc

    return ClientConfig(
        url=values.get("url", ""),
        token=values.get("token", ""),
        project=values.get("project", ""),
        cacert=values.get("cacert", ""),
        timeout=timeout_s,
    )
