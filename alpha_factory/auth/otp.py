"""
Одноразовые коды подтверждения email.

Коды хранятся в Redis с TTL 5 минут и удаляются после успешной проверки.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from alpha_factory.db.redis_client import RedisClient, get_redis_client
from alpha_factory.utils.security import secrets_equal

logger = logging.getLogger(__name__)

OTP_TTL_SECONDS = 5 * 60
OTP_KEY_PREFIX = "otp:"

NOT_FOUND_MESSAGE = "رمز التحقق غير موجود أو منتهي الصلاحية"
WRONG_CODE_MESSAGE = "رمز التحقق غير صحيح"


class OTPError(Exception):
    """Код не прошёл проверку; сообщение показывается пользователю."""


def otp_key(email: str) -> str:
    return f"{OTP_KEY_PREFIX}{email.strip().lower()}"


def codes_match(expected: str, submitted: str) -> bool:
    return secrets_equal(expected, submitted.strip())


class OTPStore:
    def __init__(self, redis: Optional[RedisClient] = None, ttl_seconds: int = OTP_TTL_SECONDS):
        self.redis = redis or get_redis_client()
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def generate_code() -> str:
        return f"{secrets.randbelow(900000) + 100000}"

    async def issue(self, email: str) -> str:
        """Создаёт код для email, заменяя предыдущий."""
        code = self.generate_code()
        await self.redis.set(otp_key(email), code, expire=self.ttl_seconds)
        return code

    async def verify(self, email: str, code: str) -> None:
        """
        Проверяет код. Неверный код не сбрасывает сохранённый.

        Raises:
            OTPError: код не найден, истёк или не совпадает
        """
        key = otp_key(email)
        stored = await self.redis.get(key)
        if stored is None:
            raise OTPError(NOT_FOUND_MESSAGE)
        if not codes_match(stored, code):
            raise OTPError(WRONG_CODE_MESSAGE)
        # Параллельная проверка того же кода могла успеть его удалить
        if not await self.redis.delete(key):
            raise OTPError(NOT_FOUND_MESSAGE)
        logger.debug(f"Код подтверждения для {email} использован")

    async def discard(self, email: str) -> None:
        await self.redis.delete(otp_key(email))


_otp_store: Optional[OTPStore] = None


def get_otp_store() -> OTPStore:
    """Dependency для FastAPI (переопределяется в тестах)."""
    global _otp_store
    if _otp_store is None:
        _otp_store = OTPStore()
    return _otp_store
