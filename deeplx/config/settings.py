"""
/**
 * @file deeplx/config/settings.py
 * @description 配置加载与合并（config.json + config.local.json，环境变量优先）。
 */
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(PACKAGE_ROOT, "config.json")
CONFIG_LOCAL_PATH = os.path.join(PACKAGE_ROOT, "config.local.json")
CONFIG_EXAMPLE_PATH = os.path.join(PACKAGE_ROOT, "config.example.json")

DEFAULT_UPSTREAM_URL = "https://www2.deepl.com/jsonrpc"
DEFAULT_MESSAGE = "DeepLX: a Python implementation of the DeepLX translation proxy."
DEFAULT_REPOSITORY = "https://github.com/OwO-Network/DeepLX"

logger = logging.getLogger(__name__)


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            value = json.load(f)
            return value if isinstance(value, dict) else {}
    except FileNotFoundError:
        return {}


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge_dicts(base[key], value)
        else:
            base[key] = value
    return base


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any]

    @property
    def upstream(self) -> Dict[str, Any]:
        return _section(self.raw, "upstream")

    @property
    def service(self) -> Dict[str, Any]:
        return _section(self.raw, "service")

    @property
    def upstream_url(self) -> str:
        endpoint = self.upstream.get("endpoint")
        return (
            os.getenv("DEEPLX_UPSTREAM_URL")
            or (endpoint if isinstance(endpoint, str) and endpoint else None)
            or DEFAULT_UPSTREAM_URL
        )

    @property
    def upstream_timeout(self) -> Optional[float]:
        # None means the HTTP library default (no explicit timeout)
        value = self.upstream.get("timeout")
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
        return None

    @property
    def message(self) -> str:
        value = self.service.get("message")
        return value if isinstance(value, str) and value else DEFAULT_MESSAGE

    @property
    def repository(self) -> str:
        value = self.service.get("repository")
        return value if isinstance(value, str) and value else DEFAULT_REPOSITORY

    def resolve_access_token(self) -> Optional[str]:
        value = self.raw.get("access_token")
        return os.getenv("TOKEN") or (value if isinstance(value, str) and value else None)

    def resolve_dl_session(self) -> Optional[str]:
        value = self.raw.get("dl_session")
        return os.getenv("DL_SESSION") or (value if isinstance(value, str) and value else None)

    @property
    def is_private(self) -> bool:
        return bool(self.resolve_access_token())


_CACHED_SETTINGS: Optional[Settings] = None
_LAST_LOAD_TIME = 0.0
_CONFIG_HASH = ""
_SETTINGS_LOCK = threading.Lock()


def _deep_diff(d1: Dict[str, Any], d2: Dict[str, Any], path="") -> list:
    diffs = []
    for k in set(d1.keys()) | set(d2.keys()):
        p = f"{path}.{k}" if path else k
        if k not in d1:
            diffs.append(f"Added: {p}")
        elif k not in d2:
            diffs.append(f"Removed: {p}")
        elif isinstance(d1[k], dict) and isinstance(d2[k], dict):
            diffs.extend(_deep_diff(d1[k], d2[k], p))
        elif d1[k] != d2[k]:
            # values may be secrets
            diffs.append(f"Changed: {p}")
    return diffs


def reload_settings(
    base_path: str = CONFIG_PATH,
    local_path: str = CONFIG_LOCAL_PATH,
    example_path: str = CONFIG_EXAMPLE_PATH,
    force: bool = False,
) -> Settings:
    global _CACHED_SETTINGS, _LAST_LOAD_TIME, _CONFIG_HASH

    with _SETTINGS_LOCK:
        now = time.time()
        # Debounce: 500ms
        if not force and _CACHED_SETTINGS and (now - _LAST_LOAD_TIME < 0.5):
            return _CACHED_SETTINGS

        try:
            base_cfg = _load_json(base_path)
            if not base_cfg and os.path.exists(example_path):
                base_cfg = _load_json(example_path)

            local_cfg = _load_json(local_path)
            merged = _merge_dicts(base_cfg, local_cfg)

            new_hash = hashlib.md5(json.dumps(merged, sort_keys=True).encode("utf-8")).hexdigest()

            if _CACHED_SETTINGS and new_hash == _CONFIG_HASH:
                _LAST_LOAD_TIME = now
                return _CACHED_SETTINGS

            is_reload = _CACHED_SETTINGS is not None
            if is_reload:
                diffs = _deep_diff(_CACHED_SETTINGS.raw, merged)
                if diffs:
                    logger.info(f"Config changes detected: {'; '.join(diffs)}")

            _CACHED_SETTINGS = Settings(raw=merged)
            _CONFIG_HASH = new_hash
            _LAST_LOAD_TIME = now

            if is_reload:
                logger.info("Configuration reloaded successfully.")

        except (OSError, ValueError) as e:
            logger.error(f"Failed to reload config: {e}. Keeping old config.")
            if not _CACHED_SETTINGS:
                logger.warning("Initializing with empty settings due to load failure.")
                _CACHED_SETTINGS = Settings(raw={})

    return _CACHED_SETTINGS


def load_settings() -> Settings:
    """
    Get current settings. Lazy loads on first call.
    Subsequent reloads are handled by the file watcher calling reload_settings().
    """
    if _CACHED_SETTINGS is None:
        return reload_settings()
    return _CACHED_SETTINGS
