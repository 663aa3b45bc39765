# -*- coding: utf-8 -*-
"""
Токены сессий и хэширование паролей.

Реализует:
- Генерация JWT токена сессии
- Валидация токенов
- Хэширование паролей (PBKDF2-SHA256, проверка старых bcrypt хэшей)
- Хэширование токенов для хранения в БД (SHA-256)
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from alpha_factory.config import settings

# Новые пароли хэшируются PBKDF2-SHA256.
# bcrypt оставлен только для проверки паролей, созданных до миграции.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "bcrypt"],
    deprecated=["bcrypt"],
    pbkdf2_sha256__default_rounds=310_000,
)


def hash_password(password: str) -> str:
    """
    Хэширует пароль безопасным образом.

    Args:
        password: Пароль в открытом виде

    Returns:
        Хэш пароля
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверяет соответствие пароля хэшу.

    Args:
        plain_password: Пароль в открытом виде
        hashed_password: Хэш пароля

    Returns:
        True если пароль верный, False иначе
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


def hash_token(token: str) -> str:
    """
    Хэширует токен с использованием SHA-256.

    В таблице sessions хранится только хэш.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def generate_token_string(length: int = 32) -> str:
    """Генерирует криптографически безопасную случайную hex-строку."""
    return secrets.token_hex(length)


def session_expires_at() -> datetime:
    """Момент истечения новой сессии."""
    return datetime.now(timezone.utc) + timedelta(days=settings.SESSION_EXPIRE_DAYS)


def create_session_token(
    user_id: str,
    session_id: str,
    expires_at: datetime,
    extra: Optional[dict[str, Any]] = None,
) -> str:
    """
    Создаёт JWT токен сессии.

    Args:
        user_id: ID пользователя (claim sub)
        session_id: ID строки в таблице sessions (claim sid)
        expires_at: Время истечения
        extra: Дополнительные данные (например, роль)

    Returns:
        JWT токен
    """
    to_encode: dict[str, Any] = dict(extra or {})
    to_encode.update({
        "sub": user_id,
        "sid": session_id,
        "exp": expires_at,
        "iat": datetime.now(timezone.utc),
        # jti делает токены уникальными даже внутри одной секунды
        "jti": generate_token_string(8),
        "type": "session",
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> Optional[dict[str, Any]]:
    """
    Проверяет и декодирует JWT токен.

    Returns:
        Декодированные данные токена или None если токен невалидный
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
