from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import tomli_w
from platformdirs import user_config_dir

APP_NAME = "respite"
STORE_FILENAME = "services.toml"
ENV_CONFIG_PATH = "RESPITE_CONFIG"

log = logging.getLogger(__name__)


class ConfigStore(Protocol):
    def lookup(self, key: str) -> Any: ...


class DictConfigStore:
    """In-memory store, mostly for tests and embedding."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data = dict(data or {})

    def lookup(self, key: str) -> Any:
        return self._data.get(key)


def store_path() -> Path:
    env_value = os.getenv(ENV_CONFIG_PATH, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return Path(user_config_dir(APP_NAME)) / STORE_FILENAME


class TomlConfigStore:
    """Shared service configuration backed by a TOML file.

    The file is read once, on first lookup. A missing file behaves like an
    empty store so that explicit overrides alone are enough to build a client.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None):
        self._path = Path(path) if path is not None else None
        self._data: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path if self._path is not None else store_path()

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            path = self.path
            try:
                with open(path, "rb") as f:
                    self._data = tomllib.load(f)
                log.debug("loaded service config from %s", path)
            except FileNotFoundError:
                log.debug("service config %s not found, using empty store", path)
                self._data = {}
        return self._data

    def lookup(self, key: str) -> Any:
        return self._load().get(key)


def _prune_none(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_prune_none(item) for item in value if item is not None]
    return value


def save_store(entries: Mapping[str, Any], path: str | os.PathLike[str] | None = None) -> Path:
    target = Path(path) if path is not None else store_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(tomli_w.dumps(_prune_none(entries)).encode("utf-8"))
    os.chmod(target, 0o600)
    return target
