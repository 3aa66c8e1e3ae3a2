"""
报告缓存 - 进程内 LRU + TTL

API 以用户画像为键缓存 (报告, 可行性) 结果，过期或被挤出后重新生成。
"""

import hashlib
import json
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Generic, Optional, TypeVar


T = TypeVar('T')


@dataclass(frozen=True)
class CacheConfig:
    max_size: int = 128
    default_ttl: int = 3600        # 秒；<= 0 表示永不过期


@dataclass
class _Slot(Generic[T]):
    value: T
    expires_at: Optional[float]    # None 表示永不过期


@dataclass
class CacheStats:
    """命中统计"""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": round(self.hit_rate * 100, 2),
        }


class LRUCache(Generic[T]):
    """
    线程安全的 LRU 缓存

    - 容量满时挤出最久未使用的条目
    - 条目在 ttl 秒之后（严格大于）视为过期，读取时惰性清除
    - clock 可注入，测试中用手动推进的时钟
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or CacheConfig()
        self._clock = clock
        self._slots: "OrderedDict[str, _Slot[T]]" = OrderedDict()
        self._lock = RLock()
        self._stats = CacheStats()

    @staticmethod
    def make_key(namespace: str, payload: Any = None) -> str:
        """命名空间 + 载荷的稳定哈希（字典键顺序无关）"""
        body = json.dumps(payload, sort_keys=True, default=str, ensure_ascii=False)
        digest = hashlib.sha256(body.encode("utf-8")).hexdigest()[:32]
        return f"{namespace}:{digest}"

    def _expiry(self, ttl: Optional[int]) -> Optional[float]:
        ttl = self.config.default_ttl if ttl is None else ttl
        return self._clock() + ttl if ttl > 0 else None

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            slot = self._slots.get(key)

            if slot is not None and slot.expires_at is not None and self._clock() > slot.expires_at:
                del self._slots[key]
                slot = None

            if slot is None:
                self._stats.misses += 1
                return None

            self._slots.move_to_end(key)
            self._stats.hits += 1
            return slot.value

    def set(self, key: str, value: T, ttl: Optional[int] = None) -> None:
        """写入条目；覆盖已有键不计为挤出"""
        with self._lock:
            self._slots.pop(key, None)

            while len(self._slots) >= self.config.max_size:
                self._slots.popitem(last=False)
                self._stats.evictions += 1

            self._slots[key] = _Slot(value=value, expires_at=self._expiry(ttl))

    def get_or_create(self, key: str, factory: Callable[[], T], refresh: bool = False) -> T:
        """
        读取缓存，未命中时调用 factory 生成并写入

        Args:
            key: 缓存键
            factory: 生成新值的函数；抛出的异常直接传播，不写入缓存
            refresh: 为 True 时跳过读取，强制重新生成并覆盖
        """
        if not refresh:
            value = self.get(key)
            if value is not None:
                return value

        value = factory()
        self.set(key, value)
        return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._slots.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            self._stats.size = len(self._slots)
            return self._stats

    def get_stats_dict(self) -> Dict[str, Any]:
        return self.stats.to_dict()
