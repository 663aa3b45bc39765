# -*- coding: utf-8 -*-
"""
Конфигурация приложения Alpha Factory.

Настройки загружаются из переменных окружения и файла .env.
Использует Pydantic Settings для валидации.
"""

from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Настройки приложения.

    Все интеграции (почта, Telegram, PayPal) опциональны:
    при пустых ключах соответствующие функции отключаются.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Основные настройки ===

    APP_NAME: str = "Alpha Factory"
    APP_VERSION: str = "1.0.0"

    # Режим отладки
    DEBUG: bool = False

    # === Сервер ===

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS разрешённые домены (через запятую)
    CORS_ORIGINS: str = "http://localhost:3000"

    # Публичный адрес сайта (для ссылок возврата PayPal и писем)
    BASE_URL: str = "http://localhost:3000"

    # === База данных ===

    # Поддерживаем оба варианта:
    # - DATABASE_URL (если задан явно)
    # - либо сборка из POSTGRES_HOST/DB/USER/PASSWORD/PORT
    DATABASE_URL: str = ""

    POSTGRES_HOST: str = "localhost"
    POSTGRES_DB: str = "alpha_factory"
    POSTGRES_USER: str = "alpha_factory"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_PORT: int = 5432

    # Настройки пула соединений
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # === Redis (коды подтверждения) ===

    REDIS_URL: str = "redis://localhost:6379/0"

    # === Сессии ===

    # Секретный ключ для подписи токенов сессии (ОБЯЗАТЕЛЬНО сменить в продакшене!)
    JWT_SECRET: str = "CHANGE_ME_IN_PRODUCTION_super_secret_key_32_chars"
    JWT_ALGORITHM: str = "HS256"

    # Время жизни сессии в днях
    SESSION_EXPIRE_DAYS: int = 7

    # Имя cookie с токеном сессии
    SESSION_COOKIE_NAME: str = "alpha_session"

    # === Почта (Resend) ===

    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "Alpha Factory <support@alphafactory.net>"
    SUPPORT_EMAIL: str = "support@alphafactory.net"

    # === Telegram ===

    TELEGRAM_BOT_TOKEN: str = ""

    # Резервный чат, если у группы нет своего
    ADMIN_TELEGRAM_CHAT_ID: str = ""

    # === PayPal ===

    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""

    # sandbox или live
    PAYPAL_MODE: str = "sandbox"

    # === Планировщик ===

    # Секрет для вызова /api/cron/daily-reminders (пусто = без проверки)
    CRON_SECRET: str = ""

    # === Голосовые заметки ===

    VOICE_UPLOAD_DIR: str = "/tmp/voice"

    # === Владелец (scripts/create_owner.py) ===

    OWNER_NAME: str = "Owner"
    OWNER_EMAIL: str = ""
    OWNER_PASSWORD: str = ""

    # === Логирование ===

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    @property
    def cors_origins_list(self) -> list[str]:
        """Возвращает список разрешённых CORS origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def telegram_configured(self) -> bool:
        """Настроен ли Telegram бот."""
        return bool(self.TELEGRAM_BOT_TOKEN.strip())

    @property
    def paypal_base_url(self) -> str:
        """Адрес REST API PayPal в зависимости от режима."""
        if self.PAYPAL_MODE.strip().lower() == "sandbox":
            return "https://api-m.sandbox.paypal.com"
        return "https://api-m.paypal.com"

    @property
    def admin_chat_id(self) -> Optional[str]:
        """Возвращает ADMIN_TELEGRAM_CHAT_ID или None."""
        value = self.ADMIN_TELEGRAM_CHAT_ID.strip()
        return value or None

    @property
    def database_url(self) -> str:
        """
        Возвращает итоговый URL подключения к БД.

        Приоритет:
        1) DATABASE_URL (если задан)
        2) Сборка из POSTGRES_*

        Пароль/логин кодируются через URL-encoding, чтобы спецсимволы
        не ломали строку подключения.
        """
        if self.DATABASE_URL and self.DATABASE_URL.strip():
            return self.DATABASE_URL.strip()

        user = (self.POSTGRES_USER or "").strip().strip('"').strip("'")
        password_raw = (self.POSTGRES_PASSWORD or "").strip()
        password_raw = password_raw.strip('"').strip("'")

        user_enc = quote_plus(user)
        password_enc = quote_plus(password_raw)

        host = (self.POSTGRES_HOST or "localhost").strip()
        db = (self.POSTGRES_DB or "").strip()
        port = int(self.POSTGRES_PORT or 5432)

        return f"postgresql+asyncpg://{user_enc}:{password_enc}@{host}:{port}/{db}"


@lru_cache()
def get_settings() -> Settings:
    """
    Получает singleton экземпляр настроек.

    Кэшируется для производительности.
    """
    return Settings()


# Глобальный экземпляр настроек
settings = get_settings()
