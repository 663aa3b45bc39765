"""
Обработчики сообщений в Telegram-чатах групп.

Апдейты приходят через webhook (/api/telegram/webhook); сессия БД
передаётся в обработчики как аргумент db.
"""

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, Message
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.db.models import Group, role_in_arabic
from alpha_factory.services.telegram import escape, now_text

logger = logging.getLogger(__name__)

router = Router()

COMPLETION_KEYWORDS = (
    "تم",
    "انتهيت",
    "أنجزت",
    "اكتمل",
    "انتهى",
    "finished",
    "done",
    "completed",
)

ADMIN_MENTION = "@admin"

CALLBACK_REPLIES = {
    "confirm_completion": "✅ تم تأكيد إنجاز المهمة! سيتم إشعار الإدارة.",
    "request_review": "📋 تم طلب المراجعة. سيتم إشعار المراجع المختص.",
}
UNKNOWN_ACTION = "إجراء غير معروف."


# ==================== Тексты ====================

def build_start_message(user_name: str) -> str:
    return (
        f"مرحباً {escape(user_name)}! 🎉\n\n"
        "أنا بوت Alpha Factory. أقوم بإرسال تحديثات المشاريع وإشعارات إنجاز المهام.\n\n"
        "استخدم /help لمعرفة الأوامر المتاحة."
    )


def build_help_message() -> str:
    return (
        "🤖 <b>مساعدة بوت Alpha Factory</b>\n\n"
        "📝 <b>الأوامر المتاحة:</b>\n"
        "/status - عرض حالة المشروع الحالية\n"
        "/team - عرض معلومات أعضاء الفريق\n"
        "/help - عرض هذه الرسالة\n"
        "/notify_admin - إشعار الإدارة بشكل مباشر\n\n"
        "🔔 <b>الإشعارات التلقائية:</b>\n"
        "• عند ذكر @admin في الرسائل\n"
        "• عند استخدام كلمات الإنجاز (تم، أنجزت، اكتمل)\n"
        "• تحديثات حالة المشروع\n\n"
        "💡 <b>نصائح:</b>\n"
        "• استخدم @admin لطلب المراجعة\n"
        "• اكتب \"تم إنجاز [اسم المهمة]\" لإشعار الفريق\n"
        "• تابع الإشعارات لمعرفة آخر التحديثات"
    )


def build_unknown_command_message(command: str) -> str:
    return f"أمر غير معروف: {escape(command)}\n\nاستخدم /help لمعرفة الأوامر المتاحة."


def _date_text(value) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def build_status_message(group: Group) -> str:
    members = "\n".join(f"• {escape(u.name)} - {escape(role_in_arabic(u.role))}" for u in group.users)
    return (
        f"📊 <b>حالة المشروع: {escape(group.name)}</b>\n\n"
        f"👥 <b>أعضاء الفريق:</b> {len(group.users)}\n"
        f"{members}\n\n"
        f"📅 <b>تاريخ الإنشاء:</b> {_date_text(group.created_at)}\n"
        f"🔄 <b>آخر تحديث:</b> {_date_text(group.updated_at)}\n\n"
        "✅ <b>الحالة:</b> نشط"
    )


def build_team_message(group: Group) -> str:
    blocks = []
    for index, user in enumerate(group.users, start=1):
        blocks.append(
            f"<b>{index}. {escape(user.name)}</b>\n"
            f"🎯 الدور: {escape(role_in_arabic(user.role))}\n"
            f"📧 البريد: {escape(user.email)}\n"
            f"✅ التحقق: {'محقق' if user.email_verified else 'غير محقق'}\n"
            f"📅 انضم في: {_date_text(user.created_at)}"
        )
    verified = sum(1 for u in group.users if u.email_verified)
    return (
        f"👥 <b>فريق المشروع: {escape(group.name)}</b>\n\n"
        + "\n\n".join(blocks)
        + "\n\n📊 <b>إحصائيات:</b>\n"
        f"• إجمالي الأعضاء: {len(group.users)}\n"
        f"• المحققين: {verified}\n"
        f"• غير المحققين: {len(group.users) - verified}"
    )


def build_admin_request_message(user_name: str, user_id: int) -> str:
    return (
        "🔔 <b>إشعار للإدارة</b>\n\n"
        f"👤 <b>المرسل:</b> {escape(user_name)}\n"
        f"📱 <b>معرف المستخدم:</b> {user_id}\n"
        f"⏰ <b>الوقت:</b> {now_text()}\n"
        "💬 <b>الرسالة:</b> طلب مراجعة أو مساعدة من الإدارة\n\n"
        "@admin يرجى التحقق من الطلب."
    )


def build_admin_mention_message(user_name: str, text: str) -> str:
    return (
        "📢 <b>تم ذكر الإدارة</b>\n\n"
        f"👤 <b>بواسطة:</b> {escape(user_name)}\n"
        f"💬 <b>الرسالة:</b> {escape(text)}\n"
        f"⏰ <b>الوقت:</b> {now_text()}\n\n"
        "@admin تم ذكرك في الرسالة أعلاه."
    )


def build_completion_message(user_name: str, text: str) -> str:
    return (
        "🎉 <b>تم رصد إنجاز مهمة!</b>\n\n"
        f"👤 <b>المنجز:</b> {escape(user_name)}\n"
        f"💬 <b>التفاصيل:</b> {escape(text)}\n"
        f"⏰ <b>الوقت:</b> {now_text()}\n\n"
        "يرجى تأكيد الإنجاز أو طلب المراجعة:"
    )


def build_completion_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="✅ تأكيد الإنجاز", callback_data="confirm_completion"),
                InlineKeyboardButton(text="📋 طلب مراجعة", callback_data="request_review"),
            ]
        ]
    )


def has_completion_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in COMPLETION_KEYWORDS)


def sender_name(message: Message) -> str:
    user = message.from_user
    if user is None:
        return ""
    return user.first_name or user.username or ""


async def find_group_by_chat(db: AsyncSession, chat_id: int) -> Optional[Group]:
    result = await db.execute(select(Group).where(Group.telegram_chat_id == str(chat_id)))
    return result.scalars().first()


# ==================== Команды ====================

@router.message(CommandStart())
async def command_start_handler(message: Message) -> None:
    await message.answer(build_start_message(sender_name(message)))


@router.message(Command("help"))
async def command_help_handler(message: Message) -> None:
    await message.answer(build_help_message(), parse_mode="HTML")


@router.message(Command("status"))
async def command_status_handler(message: Message, db: AsyncSession) -> None:
    """Состав и даты группы, к которой привязан чат."""
    try:
        group = await find_group_by_chat(db, message.chat.id)
    except Exception as e:
        logger.error(f"Ошибка получения статуса для чата {message.chat.id}: {e}", exc_info=True)
        await message.answer("❌ حدث خطأ في جلب حالة المشروع.")
        return

    if group is None:
        await message.answer("❌ لم يتم العثور على معلومات المشروع.")
        return
    await message.answer(build_status_message(group), parse_mode="HTML")


@router.message(Command("team"))
async def command_team_handler(message: Message, db: AsyncSession) -> None:
    try:
        group = await find_group_by_chat(db, message.chat.id)
    except Exception as e:
        logger.error(f"Ошибка получения команды для чата {message.chat.id}: {e}", exc_info=True)
        await message.answer("❌ حدث خطأ في جلب معلومات الفريق.")
        return

    if group is None:
        await message.answer("❌ لم يتم العثور على معلومات الفريق.")
        return
    await message.answer(build_team_message(group), parse_mode="HTML")


@router.message(Command("notify_admin"))
async def command_notify_admin_handler(message: Message) -> None:
    user_id = message.from_user.id if message.from_user else 0
    await message.answer(build_admin_request_message(sender_name(message), user_id), parse_mode="HTML")


@router.message(F.text.startswith("/"))
async def unknown_command_handler(message: Message) -> None:
    await message.answer(build_unknown_command_message(message.text))


# ==================== Сообщения ====================

@router.message(F.text)
async def text_message_handler(message: Message) -> None:
    """Упоминание @admin и ключевые слова о завершении задачи."""
    text = message.text
    name = sender_name(message)

    if ADMIN_MENTION in text:
        await message.answer(build_admin_mention_message(name, text), parse_mode="HTML")

    if has_completion_keyword(text):
        await message.answer(
            build_completion_message(name, text),
            parse_mode="HTML",
            reply_markup=build_completion_keyboard(),
        )


@router.callback_query()
async def completion_callback_handler(callback: CallbackQuery) -> None:
    reply = CALLBACK_REPLIES.get(callback.data or "", UNKNOWN_ACTION)
    if callback.message is not None:
        await callback.message.answer(reply)
    await callback.answer()
