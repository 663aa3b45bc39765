"""
Запуск сервера Alpha Factory.

Использование:
    python run_app.py
"""

import uvicorn
from alpha_factory.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "alpha_factory.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
