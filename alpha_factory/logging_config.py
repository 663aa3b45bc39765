"""
Настройка логирования API, бота и фоновых задач Alpha Factory.

Логгеры приложения живут под alpha_factory.* и пишут через root; uvicorn, aiogram, httpx
и SQLAlchemy получают свои уровни. Пустой LOG_FILE оставляет только консоль.
"""

from __future__ import annotations

import logging.config
from pathlib import Path
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 МБ
BACKUP_COUNT = 10

# Сторонние библиотеки: уровень и вывод в консоль
LIBRARY_LEVELS = {
    "uvicorn": (None, True),
    "uvicorn.error": (None, True),
    "uvicorn.access": ("WARNING", True),
    "aiogram": ("WARNING", True),
    "httpx": ("WARNING", False),
    "httpcore": ("WARNING", False),
}


def build_logging_config(level: str = "INFO", log_file: Optional[str] = None, sql_echo: bool = False) -> dict[str, Any]:
    """
    Словарь для logging.config.dictConfig.

    sql_echo включает запросы SQLAlchemy (уровень INFO, только в файл, если он задан).
    """
    level = level.upper()
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "short",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filename": str(log_file),
            "maxBytes": MAX_FILE_SIZE,
            "backupCount": BACKUP_COUNT,
            "encoding": "utf-8",
            "delay": True,
        }

    all_handlers = list(handlers)
    quiet_handlers = ["file"] if log_file else ["console"]

    loggers: dict[str, Any] = {
        "alpha_factory": {"level": level},
        "sqlalchemy.engine": {
            "handlers": quiet_handlers,
            "level": "INFO" if sql_echo else "WARNING",
            "propagate": False,
        },
    }
    for name, (library_level, to_console) in LIBRARY_LEVELS.items():
        loggers[name] = {
            "handlers": all_handlers if to_console else quiet_handlers,
            "level": library_level or level,
            "propagate": False,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
            "short": {"format": "%(levelname)s: %(name)s: %(message)s"},
        },
        "handlers": handlers,
        "root": {"handlers": all_handlers, "level": level},
        "loggers": loggers,
    }


def setup_logging(level: str = "INFO", log_file: Optional[str] = "logs/app.log", sql_echo: bool = False) -> None:
    """Применяет конфигурацию; каталог для файла лога создаётся заранее."""
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(level, log_file, sql_echo))
