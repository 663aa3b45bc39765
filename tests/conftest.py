"""Shared pytest fixtures for Alpha Factory tests."""

import os
import tempfile
from types import SimpleNamespace
from typing import Any, Optional

# Настройки читаются при импорте приложения
_TMP_DIR = tempfile.mkdtemp(prefix="alpha_factory_tests_")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "logs", "app.log")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["VOICE_UPLOAD_DIR"] = os.path.join(_TMP_DIR, "voice")
os.environ["RESEND_API_KEY"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["ADMIN_TELEGRAM_CHAT_ID"] = ""
os.environ["CRON_SECRET"] = ""

import httpx
import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from aiogram import Bot
from aiogram.client.session.base import BaseSession
from aiogram.methods import CreateChatInviteLink
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from alpha_factory.auth.jwt import create_session_token, hash_token, pwd_context, session_expires_at
from alpha_factory.auth.otp import OTPStore, get_otp_store
from alpha_factory.database import get_db_session
from alpha_factory.db import Base
from alpha_factory.db.base import new_id
from alpha_factory.db.models import Group, Project, Session, User
from alpha_factory.db.redis_client import RedisClient
from alpha_factory.main import app
from alpha_factory.services.email import EmailError, EmailService, get_email_service
from alpha_factory.services.paypal import PayPalClient, PayPalResponse, get_paypal_client
from alpha_factory.services.telegram import TelegramNotifier, get_telegram_notifier
from alpha_factory.services.users import create_user

# Быстрое хэширование для тестов; проверка берёт число раундов из хэша
pwd_context.update(pbkdf2_sha256__default_rounds=1000)

DEFAULT_PASSWORD = "secret123"
BOT_TOKEN = "123456:TEST-token"


# ==================== Подмены внешних сервисов ====================

class RecordingEmailService(EmailService):
    """Письма собираются в список вместо отправки в Resend."""

    def __init__(self):
        super().__init__(api_key="re_test", retry_delay=0)
        self.sent: list[dict[str, Any]] = []
        self.fail = False

    async def send(self, to, subject, html_body, text=None, category=None, tags=None):
        if self.fail:
            raise EmailError("Resend API error 500: test failure")
        self.sent.append({
            "to": to,
            "subject": subject,
            "html": html_body,
            "text": text,
            "category": category,
            "tags": tags,
        })
        return f"email_{len(self.sent)}"

    def by_category(self, category: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m["category"] == category]


class RecordingBotSession(BaseSession):
    """Сессия aiogram без сети: запросы к Bot API сохраняются."""

    def __init__(self):
        super().__init__()
        self.requests: list[Any] = []
        self.invite_link = "https://t.me/+testInvite"
        self.fail_invites = False

    async def make_request(self, bot, method, timeout=None):
        self.requests.append(method)
        if isinstance(method, CreateChatInviteLink):
            if self.fail_invites:
                raise RuntimeError("Bad Request: chat not found")
            return SimpleNamespace(invite_link=self.invite_link)
        return None

    async def stream_content(self, url, headers=None, timeout=30, chunk_size=65536, raise_for_status=True):
        yield b""

    async def close(self):
        pass

    def messages(self) -> list[Any]:
        return [r for r in self.requests if type(r).__name__ == "SendMessage"]


class RecordingNotifier(TelegramNotifier):
    def __init__(self, configured: bool = True):
        super().__init__(token=BOT_TOKEN if configured else "", admin_chat_id="-100999")
        self.bot_session = RecordingBotSession()
        if configured:
            self._bot = Bot(token=BOT_TOKEN, session=self.bot_session)

    def messages(self) -> list[Any]:
        return self.bot_session.messages()


class FakePayPalClient(PayPalClient):
    """Ответы PayPal по (метод, путь) без HTTP."""

    def __init__(self):
        super().__init__(client_id="test-id", client_secret="test-secret", base_url="https://paypal.test")
        self.calls: list[tuple[str, str, Optional[dict]]] = []
        self.responses: dict[tuple[str, str], PayPalResponse] = {}

    def respond(self, method: str, path: str, data: dict, status_code: int = 200) -> None:
        self.responses[(method, path)] = PayPalResponse(ok=status_code < 400, status_code=status_code, data=data)

    async def _request(self, method, path, json=None):
        self.calls.append((method, path, json))
        return self.responses.get((method, path), PayPalResponse(ok=True, status_code=200, data={}))


def completed_capture(order_id: str, reference_id: str, value: str = "150.00") -> dict:
    return {
        "id": order_id,
        "status": "COMPLETED",
        "payer": {"payer_id": "PAYER123"},
        "purchase_units": [
            {
                "reference_id": reference_id,
                "payments": {
                    "captures": [
                        {
                            "id": "CAPTURE123",
                            "status": "COMPLETED",
                            "amount": {"currency_code": "USD", "value": value},
                        }
                    ]
                },
            }
        ],
    }


# ==================== База данных ====================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    """Сессия для подготовки данных и проверок в тестах."""
    async with session_factory() as session:
        yield session


# ==================== Приложение ====================

@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def paypal():
    return FakePayPalClient()


@pytest.fixture
def redis_client():
    """Отдельный in-memory Redis на каждый тест."""
    return RedisClient(redis=FakeRedis(server=FakeServer(), decode_responses=True))


@pytest.fixture
def otp_store(redis_client):
    return OTPStore(redis_client)


@pytest.fixture
async def client(session_factory, mailer, notifier, paypal, otp_store):
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_email_service] = lambda: mailer
    app.dependency_overrides[get_telegram_notifier] = lambda: notifier
    app.dependency_overrides[get_paypal_client] = lambda: paypal
    app.dependency_overrides[get_otp_store] = lambda: otp_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Данные ====================

@pytest.fixture
def make_user(session_factory):
    """Фабрика пользователей с паролем DEFAULT_PASSWORD."""
    counter = {"n": 0}

    async def _make(role: Optional[str] = "client", name: Optional[str] = None, email: Optional[str] = None,
                    password: str = DEFAULT_PASSWORD, group_id: Optional[str] = None, **fields) -> User:
        counter["n"] += 1
        async with session_factory() as session:
            user = await create_user(
                session,
                name=name or f"User {counter['n']}",
                email=email or f"user{counter['n']}@example.com",
                password=password,
                role=role,
                username=fields.pop("username", None),
                group_id=group_id,
            )
            for key, value in fields.items():
                setattr(user, key, value)
            await session.commit()
            return user

    return _make


@pytest.fixture
def make_group(session_factory):
    async def _make(name: str = "Team Alpha", telegram_chat_id: Optional[str] = None) -> Group:
        async with session_factory() as session:
            group = Group(name=name, telegram_chat_id=telegram_chat_id)
            session.add(group)
            await session.commit()
            return group

    return _make


@pytest.fixture
def make_project(session_factory):
    async def _make(client: User, **fields) -> Project:
        values = {
            "title": "Product launch video",
            "type": "فيديو",
            "filming_status": "لم يتم الانتهاء منه",
            "date": "2025-03-01",
            "client_id": client.id,
            "group_id": client.group_id,
        }
        values.update(fields)
        async with session_factory() as session:
            project = Project(**values)
            session.add(project)
            await session.commit()
            return project

    return _make


@pytest.fixture
def auth_headers(session_factory):
    """Создаёт сессию в БД и возвращает заголовок Authorization."""
    async def _headers(user: User) -> dict[str, str]:
        session_id = new_id()
        expires_at = session_expires_at()
        token = create_session_token(user.id, session_id, expires_at, {"role": user.role})
        async with session_factory() as session:
            session.add(Session(
                id=session_id,
                user_id=user.id,
                token_hash=hash_token(token),
                expires_at=expires_at,
            ))
            await session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def fetch(session_factory):
    """Свежая копия объекта из БД (после изменений в запросе)."""
    async def _fetch(model, object_id):
        async with session_factory() as session:
            return await session.get(model, object_id)

    return _fetch
