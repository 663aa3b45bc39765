# -*- coding: utf-8 -*-
"""
Модуль аутентификации.

Включает:
- Токены сессий (JWT) и хэширование паролей
- Одноразовые коды подтверждения email
- Зависимости FastAPI для проверки ролей
"""

from alpha_factory.auth.jwt import (
    create_session_token,
    verify_token,
    hash_password,
    verify_password,
    hash_token,
)
from alpha_factory.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_optional_user,
    require_roles,
)

__all__ = [
    "create_session_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "hash_token",
    "CurrentUser",
    "get_current_user",
    "get_optional_user",
    "require_roles",
]
