# -*- coding: utf-8 -*-
"""
Уведомления в Telegram-группы проектов через aiogram Bot.

Если TELEGRAM_BOT_TOKEN не задан, все методы возвращают False
и ничего не отправляют.
"""

from __future__ import annotations

import html
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from aiogram import Bot
from aiogram.types import InlineKeyboardMarkup

from alpha_factory.config import settings
from alpha_factory.db.models import role_in_arabic

logger = logging.getLogger(__name__)

INVITE_LINK_TTL = timedelta(days=365)
INVITE_NAME_MAX_LENGTH = 32

FIELD_NAMES_AR = {
    "filming_status": "حالة التصوير",
    "edit_mode": "حالة التحرير",
    "design_mode": "حالة التصميم",
    "review_mode": "حالة المراجعة",
    "verification_mode": "تقييم المشروع",
    "review_links": "روابط المراجعة",
    "design_links": "روابط التصميم",
    "file_links": "ملفات المشروع",
    "notes": "الملاحظات",
    "title": "عنوان المشروع",
    "type": "نوع المشروع",
    "date": "تاريخ المشروع",
}


def field_name_in_arabic(field_name: str) -> str:
    return FIELD_NAMES_AR.get(field_name, field_name)


def telegram_group_name(group_name: str) -> str:
    return f"Alpha Factory - {group_name}"


def now_text() -> str:
    return time.strftime("%Y-%m-%d %H:%M UTC", time.gmtime())


def escape(value: Any) -> str:
    return html.escape(str(value)) if value is not None else ""


@dataclass
class TelegramGroupResult:
    success: bool
    chat_id: Optional[str] = None
    invite_link: Optional[str] = None
    error: Optional[str] = None


@dataclass
class TeamMember:
    name: str
    role: str
    email: str = ""


@dataclass
class NewProjectInfo:
    title: str
    type: str
    filming_status: str
    date: str
    client_name: str
    notes: Optional[str] = None
    file_links: Optional[str] = None
    voice_note_url: Optional[str] = None


@dataclass
class StatusChange:
    project_title: str
    updated_by: str
    user_role: str
    field_name: str
    old_value: str
    new_value: str
    field_name_arabic: str = field(default="")

    def __post_init__(self) -> None:
        if not self.field_name_arabic:
            self.field_name_arabic = field_name_in_arabic(self.field_name)


def build_welcome_message(group_name: str, users: list[TeamMember]) -> str:
    members = "\n".join(f"• {escape(u.name)} - {escape(role_in_arabic(u.role))}" for u in users)
    return (
        "🎉 مرحباً بكم في مجموعة Alpha Factory!\n\n"
        f"📋 <b>اسم المشروع:</b> {escape(group_name)}\n\n"
        f"👥 <b>أعضاء الفريق:</b>\n{members}\n\n"
        "🤖 <b>أنا بوت Alpha Factory وسأقوم بإرسال التحديثات التالية:</b>\n"
        "• إشعارات إنجاز المهام\n"
        "• تحديثات حالة المشروع\n"
        "• تنبيهات مهمة\n\n"
        "📝 <b>الأوامر المتاحة:</b>\n"
        "/status - عرض حالة المشروع\n"
        "/help - عرض المساعدة\n"
        "/team - عرض أعضاء الفريق\n\n"
        "🚀 بالتوفيق في مشروعكم!"
    )


def build_new_members_message(group_name: str, users: list[TeamMember]) -> str:
    members = "\n".join(f"• {escape(u.name)} - {escape(role_in_arabic(u.role))}" for u in users)
    return (
        f"👋 <b>أعضاء جدد في {escape(group_name)}</b>\n\n"
        f"{members}\n\n"
        f"⏰ <b>الوقت:</b> {now_text()}\n\n"
        "مرحباً بكم في الفريق! 🚀"
    )


def build_new_project_message(info: NewProjectInfo) -> str:
    lines = [
        "🆕 <b>مشروع جديد!</b>",
        "",
        f"📋 <b>العنوان:</b> {escape(info.title)}",
        f"🎬 <b>النوع:</b> {escape(info.type)}",
        f"📹 <b>حالة التصوير:</b> {escape(info.filming_status)}",
        f"📅 <b>التاريخ:</b> {escape(info.date)}",
        f"👤 <b>العميل:</b> {escape(info.client_name)}",
    ]
    if info.notes:
        lines.append(f"📝 <b>الملاحظات:</b> {escape(info.notes)}")
    if info.file_links:
        lines.append(f"🔗 <b>الملفات:</b> {escape(info.file_links)}")
    if info.voice_note_url:
        lines.append(f"🎤 <b>ملاحظة صوتية:</b> {escape(info.voice_note_url)}")
    lines.extend(["", f"⏰ <b>الوقت:</b> {now_text()}"])
    return "\n".join(lines)


def build_status_update_message(change: StatusChange) -> str:
    return (
        f"🔄 <b>تحديث المشروع: {escape(change.project_title)}</b>\n\n"
        f"👤 <b>بواسطة:</b> {escape(change.updated_by)} ({escape(role_in_arabic(change.user_role))})\n"
        f"📝 <b>{escape(change.field_name_arabic)}:</b>\n"
        f"• من: {escape(change.old_value)}\n"
        f"• إلى: {escape(change.new_value)}\n\n"
        f"⏰ <b>الوقت:</b> {now_text()}"
    )


class TelegramNotifier:
    """
    Отправка сообщений в чаты групп.

    Экземпляр aiogram Bot создаётся лениво при первой отправке.
    """

    def __init__(self, token: Optional[str] = None, admin_chat_id: Optional[str] = None):
        self.token = (settings.TELEGRAM_BOT_TOKEN if token is None else token).strip()
        self.admin_chat_id = settings.admin_chat_id if admin_chat_id is None else admin_chat_id
        self._bot: Optional[Bot] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    @property
    def bot(self) -> Optional[Bot]:
        if not self.is_configured:
            return None
        if self._bot is None:
            self._bot = Bot(token=self.token)
        return self._bot

    async def close(self) -> None:
        if self._bot is not None:
            await self._bot.session.close()
            self._bot = None

    async def send(
        self,
        chat_id: str,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> bool:
        """Отправляет HTML-сообщение; ошибки Telegram логируются."""
        bot = self.bot
        if bot is None:
            logger.warning("Telegram бот не настроен, сообщение не отправлено")
            return False
        try:
            await bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode="HTML",
                reply_markup=reply_markup,
            )
            return True
        except Exception as exc:
            logger.error(f"Не удалось отправить сообщение в чат {chat_id}: {exc}")
            return False

    async def create_group_invite(
        self,
        group_name: str,
        users: list[TeamMember],
        chat_id: Optional[str] = None,
    ) -> TelegramGroupResult:
        """
        Создаёт ссылку-приглашение в чат группы и отправляет приветствие.

        Без chat_id используется ADMIN_TELEGRAM_CHAT_ID.
        """
        bot = self.bot
        if bot is None:
            return TelegramGroupResult(
                success=False,
                error="Telegram bot is not configured. Please set TELEGRAM_BOT_TOKEN environment variable.",
            )

        target_chat_id = chat_id or self.admin_chat_id
        if not target_chat_id:
            return TelegramGroupResult(
                success=False,
                error="No chat ID provided and ADMIN_TELEGRAM_CHAT_ID not set",
            )

        invite_name = f"Alpha Factory - {group_name}"[:INVITE_NAME_MAX_LENGTH]
        try:
            invite = await bot.create_chat_invite_link(
                chat_id=target_chat_id,
                name=invite_name,
                member_limit=len(users) + 2,
                creates_join_request=False,
                expire_date=datetime.now(timezone.utc) + INVITE_LINK_TTL,
            )
        except Exception as exc:
            logger.error(f"Ошибка создания приглашения Telegram для группы {group_name}: {exc}")
            return TelegramGroupResult(success=False, error=str(exc) or "Failed to create Telegram group")

        await self.send(target_chat_id, build_welcome_message(group_name, users))

        return TelegramGroupResult(
            success=True,
            chat_id=str(target_chat_id),
            invite_link=invite.invite_link,
        )

    async def notify_admin(
        self,
        chat_id: str,
        completed_by: str,
        role: str,
        task_type: str,
        project_name: str,
    ) -> bool:
        """Сообщение о выполненной задаче с упоминанием @admin."""
        text = (
            "✅ <b>تم إنجاز مهمة جديدة!</b>\n\n"
            f"👤 <b>المنجز:</b> {escape(completed_by)}\n"
            f"🎯 <b>الدور:</b> {escape(role_in_arabic(role))}\n"
            f"📋 <b>نوع المهمة:</b> {escape(task_type)}\n"
            f"🏷️ <b>المشروع:</b> {escape(project_name)}\n"
            f"⏰ <b>الوقت:</b> {now_text()}\n\n"
            "@admin يرجى مراجعة العمل المنجز."
        )
        return await self.send(chat_id, text)

    async def send_project_update(
        self,
        chat_id: str,
        update_type: str,
        message: str,
        project_name: str,
    ) -> bool:
        text = (
            f"📢 <b>تحديث المشروع: {escape(project_name)}</b>\n\n"
            f"🔔 <b>نوع التحديث:</b> {escape(update_type)}\n"
            f"📝 <b>التفاصيل:</b> {escape(message)}\n"
            f"⏰ <b>الوقت:</b> {now_text()}"
        )
        return await self.send(chat_id, text)

    async def send_new_member_notification(self, chat_id: str, users: list[TeamMember], group_name: str) -> bool:
        return await self.send(chat_id, build_new_members_message(group_name, users))

    async def send_new_project_notification(self, chat_id: str, info: NewProjectInfo) -> bool:
        return await self.send(chat_id, build_new_project_message(info))

    async def send_project_status_update(self, chat_id: str, change: StatusChange) -> bool:
        return await self.send(chat_id, build_status_update_message(change))


_notifier: Optional[TelegramNotifier] = None


def get_telegram_notifier() -> TelegramNotifier:
    """Dependency для FastAPI (переопределяется в тестах)."""
    global _notifier
    if _notifier is None:
        _notifier = TelegramNotifier()
    return _notifier


async def close_telegram_notifier() -> None:
    if _notifier is not None:
        await _notifier.close()
