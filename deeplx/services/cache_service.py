"""
/**
 * @file deeplx/services/cache_service.py
 * @description 翻译结果缓存（进程内，带过期时间）。
 */
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

CACHE_TTL_SECONDS = 3600
# expired rows for keys never read again are dropped on put, at most this often
SWEEP_INTERVAL_SECONDS = 60


def make_cache_key(source_lang: str, target_lang: str, text: str) -> str:
    return f"{source_lang}/{target_lang}/{quote(text, safe='')}"


@dataclass(frozen=True)
class CacheEntry:
    value: str
    expires_at: float


class TranslationCache:
    """Key-value store for serialized translation results."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError


class InMemoryTranslationCache(TranslationCache):
    def __init__(self, clock=time.time, sweep_interval: float = SWEEP_INTERVAL_SECONDS):
        self._rows: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        expired = [key for key, row in self._rows.items() if row.expires_at <= now]
        for key in expired:
            del self._rows[key]
        self._next_sweep = now + self._sweep_interval

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._rows.get(key)
            if row is None:
                return None
            if row.expires_at <= self._clock():
                del self._rows[key]
                return None
            return row.value

    def put(self, key: str, value: str, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._rows[key] = CacheEntry(value=value, expires_at=now + ttl_seconds)

    def stored_rows(self) -> int:
        """Rows held in memory, expired ones included."""
        with self._lock:
            return len(self._rows)

    def delete(self, key: str) -> None:
        with self._lock:
            self._rows.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for row in self._rows.values() if row.expires_at > now)
