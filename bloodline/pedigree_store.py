from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Dict, Optional, Tuple

from diskcache import Cache

from .models import CacheOpenError

# Default durable cache directory (relative to the working directory)
DEFAULT_CACHE_DIR = Path("./bloodcache_db")

# Tier-1 capacity (entries)
LRU_LIMIT = 200_000

# Pending durable writes committed per transaction
WRITE_BATCH_SIZE = 10_000

PairKey = Tuple[str, str]  # (descendant_id, ancestor_id)


def encode_key(key: PairKey) -> str:
    """
    Durable key: "descendant|ancestor".
    """
    descendant, ancestor = key
    return f"{descendant}|{ancestor}"


def encode_value(value: float) -> str:
    # repr() round-trips exactly, so durable hits equal fresh computations
    return repr(float(value))


def decode_value(raw: str) -> float:
    return float(raw)


# ---------------------------------------------------------------------------
# Tier 1: bounded, volatile
# ---------------------------------------------------------------------------

class FifoCache:
    """
    Bounded in-memory cache with strict FIFO eviction.

    The oldest *inserted* key is evicted once the size exceeds capacity.
    Reads never move a key, so a frequently read entry is evicted just as
    early as an unread one. Re-putting a key updates its value in place.
    """

    def __init__(self, capacity: int = LRU_LIMIT) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._data: "OrderedDict[PairKey, float]" = OrderedDict()

    def get(self, key: PairKey) -> Optional[float]:
        return self._data.get(key)

    def put(self, key: PairKey, value: float) -> None:
        if key in self._data:
            self._data[key] = value
            return
        self._data[key] = value
        if len(self._data) > self.capacity:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


# ---------------------------------------------------------------------------
# Tier 2: unbounded, durable
# ---------------------------------------------------------------------------

class DurableCache:
    """
    Directory-backed persistent map, surviving process restarts.

    Backed by diskcache with eviction disabled, so the store only grows.
    Writes are buffered and committed in one transaction per batch;
    flush() commits whatever is pending. close() flushes first.
    """

    def __init__(self, directory: Path = DEFAULT_CACHE_DIR, batch_size: int = WRITE_BATCH_SIZE) -> None:
        self.directory = Path(directory)
        self.batch_size = batch_size
        self._pending: Dict[str, str] = {}
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._cache: Optional[Cache] = Cache(
                str(self.directory),
                eviction_policy="none",
            )
        except Exception as e:
            raise CacheOpenError(f"cannot open durable cache at {self.directory}: {e}") from e

    def _store(self) -> Cache:
        if self._cache is None:
            raise CacheOpenError(f"durable cache at {self.directory} is closed")
        return self._cache

    def get(self, key: PairKey) -> Optional[float]:
        skey = encode_key(key)
        raw = self._pending.get(skey)
        if raw is None:
            raw = self._store().get(skey)
        if raw is None:
            return None
        return decode_value(raw)

    def put(self, key: PairKey, value: float) -> None:
        self._pending[encode_key(key)] = encode_value(value)
        if len(self._pending) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        store = self._store()
        with store.transact():
            for skey, raw in self._pending.items():
                store.set(skey, raw)
        self._pending.clear()

    def close(self) -> None:
        if self._cache is None:
            return
        self.flush()
        self._cache.close()
        self._cache = None

    def __len__(self) -> int:
        store = self._store()
        return len(store) + sum(1 for k in self._pending if k not in store)

    def __enter__(self) -> "DurableCache":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Both tiers
# ---------------------------------------------------------------------------

class TieredCache:
    """
    Tier 1 (FifoCache) in front of tier 2 (DurableCache).

    - get: tier 1, then tier 2; a tier-2 hit is promoted into tier 1.
    - put: written to both tiers.
    - durable=None runs memory-only (tier 1 alone).
    """

    def __init__(self, memory: Optional[FifoCache] = None, durable: Optional[DurableCache] = None) -> None:
        self.memory = memory if memory is not None else FifoCache()
        self.durable = durable
        self.hits_memory = 0
        self.hits_durable = 0
        self.misses = 0

    def get(self, key: PairKey) -> Optional[float]:
        value = self.memory.get(key)
        if value is not None:
            self.hits_memory += 1
            return value

        if self.durable is not None:
            value = self.durable.get(key)
            if value is not None:
                self.hits_durable += 1
                self.memory.put(key, value)
                return value

        self.misses += 1
        return None

    def put(self, key: PairKey, value: float) -> None:
        self.memory.put(key, value)
        if self.durable is not None:
            self.durable.put(key, value)

    def flush(self) -> None:
        if self.durable is not None:
            self.durable.flush()

    def close(self) -> None:
        if self.durable is not None:
            self.durable.close()

    def stats(self) -> dict[str, int]:
        return {
            "memory_entries": len(self.memory),
            "hits_memory": self.hits_memory,
            "hits_durable": self.hits_durable,
            "misses": self.misses,
        }
