# -*- coding: utf-8 -*-
"""
Pydantic схемы для аутентификации.

Поля запросов необязательные: обязательность проверяется в обработчиках,
чтобы вернуть клиенту привычное сообщение об ошибке.
"""

from typing import Optional

from pydantic import Field

from alpha_factory.models.common import CamelModel


# ==================== Запросы ====================

class SignInRequest(CamelModel):
    """Вход по email и паролю."""
    email: Optional[str] = Field(None, description="Email пользователя")
    password: Optional[str] = Field(None, description="Пароль")


class FindUserRequest(CamelModel):
    """Поиск email по email или логину."""
    identifier: Optional[str] = Field(None, description="Email или имя пользователя")


class SendOtpRequest(CamelModel):
    email: Optional[str] = Field(None, description="Email для отправки кода")


class VerifyOtpRequest(CamelModel):
    email: Optional[str] = Field(None, description="Email")
    otp: Optional[str] = Field(None, description="Шестизначный код")


class VerifyCredentialsRequest(CamelModel):
    """Проверка пары email/пароль без создания сессии."""
    email: Optional[str] = Field(None, description="Email")
    password: Optional[str] = Field(None, description="Пароль")


# ==================== Ответы ====================

class SessionUser(CamelModel):
    """Пользователь текущей сессии."""
    id: str
    name: str
    email: str
    role: Optional[str] = None
    username: Optional[str] = None
    email_verified: bool = False
