"""
Клиент Redis для временных данных (коды подтверждения email).
"""

from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from alpha_factory.config import settings


class RedisClient:
    """
    Асинхронный клиент Redis с ленивым подключением.

    Args:
        url: Адрес Redis (по умолчанию REDIS_URL)
        redis: Готовый клиент (например, в тестах)
    """

    def __init__(self, url: Optional[str] = None, redis: Optional[Redis] = None):
        self.url = url or settings.REDIS_URL
        self.redis: Optional[Redis] = redis
        self._pool: Optional[ConnectionPool] = None

    async def connect(self) -> Redis:
        if self.redis is None:
            self._pool = ConnectionPool.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=20,
            )
            self.redis = Redis(connection_pool=self._pool)
        return self.redis

    async def disconnect(self) -> None:
        if self._pool is None:
            return
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
        await self._pool.disconnect()
        self._pool = None

    async def get(self, key: str) -> Optional[str]:
        redis = await self.connect()
        return await redis.get(key)

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> bool:
        """
        Сохраняет значение.

        Args:
            expire: Время жизни в секундах
        """
        redis = await self.connect()
        return bool(await redis.set(key, value, ex=expire))

    async def delete(self, key: str) -> int:
        """Возвращает количество удалённых ключей."""
        redis = await self.connect()
        return await redis.delete(key)

    async def ttl(self, key: str) -> int:
        redis = await self.connect()
        return await redis.ttl(key)


_redis_client = RedisClient()


def get_redis_client() -> RedisClient:
    return _redis_client


async def close_redis() -> None:
    await _redis_client.disconnect()
