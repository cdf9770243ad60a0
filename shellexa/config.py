"""Configuration storage for shellexa.

The configuration names the model backend to talk to and is written by
``shellexa configure``.  It lives in a small YAML file, by default
``~/.shellexa/config.yaml``::

    provider: http
    api_url: http://localhost:11434/api/chat
    model: llama3
    api_key: null

``provider`` selects the :mod:`shellexa.providers` implementation
(``http`` for one JSON request per prompt, ``chat`` for a stateful Ollama
chat session).  ``api_url`` may be omitted for ``chat``, in which case
the Ollama SDK uses its default host.  ``api_key`` is optional and only
sent by the HTTP provider.

The file path is never looked up implicitly by the rest of the package:
the CLI builds one :class:`ConfigStore` at start-up and passes it down.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from . import ShellexaError

CONFIG_ENV_VAR = "SHELLEXA_CONFIG"
DEFAULT_PROVIDER = "http"
PROVIDERS = ("http", "chat")


class ConfigError(ShellexaError):
    """Raised when no usable configuration has been established."""


@dataclass
class Config:
    """Settings needed to reach the model backend."""

    api_url: Optional[str]
    model: str
    provider: str = DEFAULT_PROVIDER
    api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        api_url = _to_optional_string(data.get("api_url"))
        model = _to_optional_string(data.get("model"))
        if model is None:
            raise ConfigError("Configuration must define 'model'")
        provider = (_to_optional_string(data.get("provider")) or DEFAULT_PROVIDER).lower()
        if provider not in PROVIDERS:
            raise ConfigError(
                f"Unknown provider '{provider}' in configuration; expected one of {', '.join(PROVIDERS)}"
            )
        # The chat SDK falls back to its default host; HTTP needs a full URL.
        if api_url is None and provider == "http":
            raise ConfigError("The http provider requires 'api_url'")
        return cls(
            api_url=api_url,
            model=model,
            provider=provider,
            api_key=_to_optional_string(data.get("api_key")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_config_path() -> Path:
    """Return the path to the configuration file (~/.shellexa/config.yaml)."""
    return Path.home() / ".shellexa" / "config.yaml"


class ConfigStore:
    """Read and write the YAML configuration file at ``path``."""

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or default_config_path()
        self.path = Path(path).expanduser()

    def load(self) -> Config:
        """Load the configuration.

        :raises ConfigError: If the file is missing, unreadable, not a
          YAML mapping or lacks required keys.
        """
        if not self.path.is_file():
            raise ConfigError(f"No configuration found at {self.path}")
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Could not read configuration {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration {self.path} is not a mapping")
        return Config.from_dict(data)

    def save(self, config: Config) -> None:
        """Persist configuration to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(config.to_dict(), f, sort_keys=False)


def _to_optional_string(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
