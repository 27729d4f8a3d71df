import logging
import os
from typing import Optional, Protocol, Tuple, runtime_checkable

import aiofiles
from redis.asyncio import Redis

from toksave.config.settings import Config

logger = logging.getLogger(__name__)


@runtime_checkable
class HistoryStorage(Protocol):
    """Key-value string store holding the serialized history"""

    async def load(self) -> Optional[str]:
        ...

    async def save(self, value: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage, nothing survives a restart"""

    def __init__(self, initial: Optional[str] = None):
        self.value = initial

    async def load(self) -> Optional[str]:
        return self.value

    async def save(self, value: str) -> None:
        self.value = value


class FileStorage:
    """JSON file on local disk, replaced atomically on every save"""

    def __init__(self, path: str):
        self.path = path

    async def load(self) -> Optional[str]:
        if not os.path.exists(self.path):
            return None
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            return await f.read()

    async def save(self, value: str) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = self.path + ".tmp"
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(value)
        os.replace(tmp_path, self.path)


class RedisStorage:
    """Single Redis string key"""

    def __init__(self, redis: Redis, key: str):
        self.redis = redis
        self.key = key

    async def load(self) -> Optional[str]:
        return await self.redis.get(self.key)

    async def save(self, value: str) -> None:
        await self.redis.set(self.key, value)


def build_storage(config: Config, redis: Optional[Redis] = None) -> Tuple[HistoryStorage, str]:
    """Pick the history backend from config, returns (storage, backend name)"""
    backend = config.history.backend

    if backend == "memory":
        return MemoryStorage(), "memory"

    if backend == "redis":
        if redis is not None:
            return RedisStorage(redis, config.history.storage_key), "redis"
        logger.warning("History backend is redis but Redis is unavailable, falling back to file")

    # storage_key is Redis only
    return FileStorage(config.history.file_path), "file"
