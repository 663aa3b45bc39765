"""
Скрипт для создания аккаунта владельца.

Данные берутся из OWNER_NAME / OWNER_EMAIL / OWNER_PASSWORD,
недостающие запрашиваются в консоли.

Использование:
    python scripts/create_owner.py
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from alpha_factory.config import settings
from alpha_factory.database import get_async_session
from alpha_factory.services.users import OwnerSetupError, create_owner
from alpha_factory.utils.security import is_email

MIN_PASSWORD_LENGTH = 6


async def setup_owner():
    """Создаёт владельца, если его ещё нет."""
    print("=" * 60)
    print("Создание аккаунта владельца Alpha Factory")
    print("=" * 60)

    name = settings.OWNER_NAME.strip() or input("👤 Имя владельца: ").strip()
    email = settings.OWNER_EMAIL.strip() or input("📧 Email владельца: ").strip()
    if not is_email(email):
        print("❌ Ошибка: некорректный email")
        return

    password = settings.OWNER_PASSWORD
    if not password:
        password = input("🔑 Пароль (минимум 6 символов): ").strip()
        confirm_password = input("🔑 Подтвердите пароль: ").strip()
        if password != confirm_password:
            print("❌ Ошибка: Пароли не совпадают")
            return
    if len(password) < MIN_PASSWORD_LENGTH:
        print("❌ Ошибка: Пароль должен быть не менее 6 символов")
        return

    async with get_async_session() as session:
        try:
            owner = await create_owner(session, name, email, password)
        except OwnerSetupError as e:
            print(f"❌ {e}")
            return

    print("\n" + "=" * 60)
    print("✅ Владелец успешно создан!")
    print("=" * 60)
    print(f"   ID: {owner.id}")
    print(f"   Имя: {owner.name}")
    print(f"   Email: {owner.email}")
    print("\n💡 Теперь можно войти:")
    print(f"   {settings.BASE_URL}")
    print("=" * 60)


if __name__ == "__main__":
    try:
        asyncio.run(setup_owner())
    except KeyboardInterrupt:
        print("\n\n❌ Прервано пользователем")
    except Exception as e:
        print(f"\n❌ Ошибка: {e}")
        import traceback
        traceback.print_exc()
