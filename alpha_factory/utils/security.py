# -*- coding: utf-8 -*-
"""
Утилиты безопасности.

Содержит функции для:
- Валидации email и телефона
- Проверки имён загружаемых файлов
- Маскирования и сравнения секретов
"""

import re
import secrets

from fastapi import Request

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]+$")


def get_client_info(request: Request) -> tuple[str, str]:
    """Извлекает IP и User-Agent из запроса."""
    # Учитываем прокси
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    user_agent = request.headers.get("User-Agent", "unknown")
    return ip, user_agent


def secrets_equal(expected: str, submitted: str) -> bool:
    """Сравнение секретов за постоянное время; строки сравниваются как UTF-8 байты."""
    return secrets.compare_digest(expected.encode("utf-8"), submitted.encode("utf-8"))


def is_email(value: str) -> bool:
    """Похожа ли строка на email (используется для входа по email или логину)."""
    return bool(value) and bool(EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def is_safe_filename(filename: str) -> bool:
    """
    Проверяет имя файла на попытку выхода из каталога.

    Args:
        filename: Имя файла из URL

    Returns:
        False для пустых имён и имён с '..', '/' или '\\'
    """
    if not filename:
        return False
    return not (".." in filename or "/" in filename or "\\" in filename)


def mask_secret(value: str, visible_chars: int = 10) -> str:
    """
    Маскирует секрет для вывода в диагностике.

    Returns:
        Первые visible_chars символов и '...', либо 'Not set'
    """
    if not value:
        return "Not set"
    return f"{value[:visible_chars]}..."
