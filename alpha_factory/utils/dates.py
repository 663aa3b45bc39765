"""Помощники для работы с датами (все расчёты в UTC)."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def ensure_aware(value: datetime) -> datetime:
    """SQLite возвращает naive datetime; считаем такие значения UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Разбирает дату из запроса: ISO-строку или YYYY-MM-DD.

    Returns:
        datetime в UTC или None, если строка пустая или некорректная
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_aware(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        return None
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def isoformat_ms(value: datetime) -> str:
    """ISO-8601 с миллисекундами и суффиксом Z."""
    value = ensure_aware(value).astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
