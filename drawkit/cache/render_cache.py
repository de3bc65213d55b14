from __future__ import annotations

from dataclasses import dataclass, field
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Literal

import numpy as np

from drawkit.config import DEFAULT_PLACEHOLDER_TTL_S, DEFAULT_WIPE_INTERVAL_S


LOGGER = logging.getLogger(__name__)

Partition = Literal["elements", "images"]
PARTITIONS: tuple[str, ...] = ("elements", "images")

Bitmap = np.ndarray
RenderFn = Callable[[], "Bitmap | Awaitable[Bitmap]"]


@dataclass
class CacheEntry:
    value: Any
    expires_at: float | None = None
    placeholder: bool = False

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass(frozen=True)
class Transient:
    """Render output that is returned but not memoized, e.g. drawn over a placeholder image."""

    bitmap: Bitmap


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


class RenderCache:
    """Content-addressable memo for rendered shapes and fetched images.

    Entries live until their partition is cleared, either explicitly or by the
    periodic wipe. Only placeholder images carry an individual expiry.
    """

    def __init__(
        self,
        *,
        wipe_interval_s: float = DEFAULT_WIPE_INTERVAL_S,
        placeholder_ttl_s: float = DEFAULT_PLACEHOLDER_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if wipe_interval_s <= 0:
            raise ValueError("wipe_interval_s must be > 0")
        if placeholder_ttl_s <= 0:
            raise ValueError("placeholder_ttl_s must be > 0")
        self._wipe_interval_s = wipe_interval_s
        self._placeholder_ttl_s = placeholder_ttl_s
        self._clock = clock
        self._partitions: dict[str, dict[str, CacheEntry]] = {name: {} for name in PARTITIONS}
        self._stats: dict[str, CacheStats] = {name: CacheStats() for name in PARTITIONS}
        self._last_wipe = clock()

    @property
    def placeholder_ttl_s(self) -> float:
        return self._placeholder_ttl_s

    def stats(self, partition: Partition = "elements") -> CacheStats:
        return self._stats[_check_partition(partition)]

    def size(self, partition: Partition = "elements") -> int:
        return len(self._partitions[_check_partition(partition)])

    async def get_or_render(self, key: str, render: RenderFn) -> Bitmap:
        """Return the bitmap stored under `key`, rendering and storing it on a miss."""

        cached = self.get("elements", key)
        if cached is not None:
            return cached
        result = render()
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Transient):
            return result.bitmap
        self.put("elements", key, result)
        return result

    def get(self, partition: Partition, key: str) -> Any | None:
        entry = self.get_entry(partition, key)
        return None if entry is None else entry.value

    def get_entry(self, partition: Partition, key: str) -> CacheEntry | None:
        self._maybe_wipe()
        store = self._partitions[_check_partition(partition)]
        stats = self._stats[partition]
        entry = store.get(key)
        if entry is not None and entry.expired(self._clock()):
            del store[key]
            entry = None
        if entry is None:
            stats.misses += 1
            return None
        stats.hits += 1
        return entry

    def contains(self, partition: Partition, key: str) -> bool:
        self._maybe_wipe()
        entry = self._partitions[_check_partition(partition)].get(key)
        return entry is not None and not entry.expired(self._clock())

    def put(
        self,
        partition: Partition,
        key: str,
        value: Any,
        *,
        ttl_s: float | None = None,
        placeholder: bool = False,
    ) -> None:
        expires_at = self._clock() + ttl_s if ttl_s is not None else None
        entry = CacheEntry(value=value, expires_at=expires_at, placeholder=placeholder)
        self._partitions[_check_partition(partition)][key] = entry

    def put_placeholder(self, key: str, value: Bitmap) -> None:
        self.put("images", key, value, ttl_s=self._placeholder_ttl_s, placeholder=True)

    def clear(self, partition: Partition | None = None) -> None:
        names = PARTITIONS if partition is None else (_check_partition(partition),)
        for name in names:
            self._partitions[name].clear()
        LOGGER.debug("cleared render cache partitions: %s", ", ".join(names))

    def _maybe_wipe(self) -> None:
        now = self._clock()
        if now - self._last_wipe < self._wipe_interval_s:
            return
        self._last_wipe = now
        if any(self._partitions[name] for name in PARTITIONS):
            LOGGER.info("periodic render cache wipe after %.0fs", self._wipe_interval_s)
        self.clear()


def _check_partition(partition: str) -> str:
    if partition not in PARTITIONS:
        raise ValueError(f"unknown cache partition `{partition}`; expected one of {', '.join(PARTITIONS)}")
    return partition
