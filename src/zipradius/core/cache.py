"""
On-disk JSON cache for geocoder answers.

A postcode missing from the local dataset costs one Mapbox request per TTL. Entries are
JSON files under `<cache dir>/<namespace>/<xx>/<sha256>.json`, where `xx` is the first
byte of the digest. Expired entries stay on disk so `get_or_set(stale_if_error=True)`
can still answer while the upstream is unreachable.
"""

from __future__ import annotations

import contextvars
import json
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable, Iterator


@dataclass(frozen=True)
class CacheEntry:
    stored_at_unix: int
    ttl_seconds: int
    value: Any

    def is_fresh(self, now: int, ttl_seconds: int | None = None) -> bool:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        return now - self.stored_at_unix <= ttl


@dataclass
class CacheStats:
    """Cache traffic seen while one request was being served."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    stale_fallbacks: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


_active_stats: contextvars.ContextVar[CacheStats | None] = contextvars.ContextVar(
    "zipradius_cache_stats", default=None
)


def _count(field: str) -> None:
    stats = _active_stats.get()
    if stats is not None:
        setattr(stats, field, getattr(stats, field) + 1)


@contextmanager
def record_cache_stats() -> Iterator[CacheStats]:
    """Collect cache counters for everything run inside the block (per thread/task)."""
    stats = CacheStats()
    token = _active_stats.set(stats)
    try:
        yield stats
    finally:
        _active_stats.reset(token)


class FileCache:
    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 86400):
        self._base_dir = Path(base_dir)
        self._enabled = enabled
        self._default_ttl_seconds = int(default_ttl_seconds)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}\x00{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / digest[:2] / f"{digest}.json"

    def _load(self, namespace: str, key: str) -> CacheEntry | None:
        path = self._path(namespace, key)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                stored_at_unix=int(raw["stored_at_unix"]),
                ttl_seconds=int(raw["ttl_seconds"]),
                value=raw["value"],
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError):
            # Unreadable entry counts as absent; the next write replaces it.
            return None

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Fresh cached value, or None. `ttl_seconds` overrides the TTL stored with the entry."""
        if not self._enabled:
            return None
        entry = self._load(namespace, key)
        if entry is None or not entry.is_fresh(int(time.time()), ttl_seconds):
            _count("misses")
            return None
        _count("hits")
        return entry.value

    def get_stale(self, namespace: str, key: str) -> Any | None:
        """Cached value regardless of age (None when nothing was ever stored)."""
        if not self._enabled:
            return None
        entry = self._load(namespace, key)
        return None if entry is None else entry.value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        if not self._enabled:
            return
        path = self._path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = CacheEntry(
            stored_at_unix=int(time.time()),
            ttl_seconds=self._default_ttl_seconds if ttl_seconds is None else int(ttl_seconds),
            value=value,
        )
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(entry), ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
        _count("sets")

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
        *,
        stale_if_error: bool = False,
        stale_predicate: Callable[[Exception], bool] | None = None,
    ) -> Any:
        """Cached value, else `builder()` stored for next time (`None` is never stored).

        When `builder()` raises and `stale_if_error` is set, an expired entry is returned
        instead, provided `stale_predicate` (if given) accepts the exception.
        """
        cached = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if cached is not None:
            return cached
        try:
            value = builder()
        except Exception as exc:
            if not stale_if_error or (stale_predicate is not None and not stale_predicate(exc)):
                raise
            stale = self.get_stale(namespace, key)
            if stale is None:
                raise
            _count("stale_fallbacks")
            return stale
        if value is not None:
            self.set(namespace, key, value, ttl_seconds=ttl_seconds)
        return value
