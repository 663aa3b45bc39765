# -*- coding: utf-8 -*-
"""
Отправка писем через Resend HTTP API.

Все письма на арабском, RTL. Публичные методы возвращают bool
(или сводку для массовой рассылки) и не пробрасывают ошибки провайдера,
кроме send(), который используется там, где ошибку нужно вернуть клиенту.
"""

from __future__ import annotations

import asyncio
import html
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from alpha_factory.config import settings
from alpha_factory.db.models import role_in_arabic
from alpha_factory.utils.security import is_email

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"

REMINDER_TITLES = {
    "3": "تذكير بالفاتورة المستحقة - Alpha Factory",
    "7": "تذكير عاجل - فاتورة متأخرة - Alpha Factory",
    "10": "إشعار نهائي - تعليق الحساب - Alpha Factory",
}

REMINDER_MESSAGES = {
    "3": "نود تذكيرك بضرورة تسديد الفاتورة في الوقت المحدد لضمان استمرار الخدمة دون أي انقطاع.",
    "7": "فاتورتك متأخرة منذ 7 أيام. يرجى التسديد فوراً لتجنب تعليق الحساب.",
    "10": "تم تعليق حسابك بسبب عدم تسديد الفاتورة خلال 10 أيام من تاريخ الاستحقاق.",
}

OTP_SUBJECT = "رمز التحقق - مصنع ألفا"
CREDENTIALS_SUBJECT = "معلومات حسابك - Alpha Factory"


class EmailError(Exception):
    """Провайдер отклонил письмо или недоступен."""


@dataclass
class UserCredentials:
    """Данные для письма с доступами нового участника."""
    name: str
    email: str
    username: str
    password: str
    role: str
    group_name: str
    telegram_invite_link: Optional[str] = None


@dataclass
class BulkEmailResult:
    successful: int = 0
    failed: int = 0
    results: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {"successful": self.successful, "failed": self.failed, "results": self.results}


def _layout(title: str, body: str) -> str:
    """Общая RTL-обёртка писем."""
    return f"""<!DOCTYPE html>
<html dir="rtl" lang="ar">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(title)}</title>
</head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #0B0B0B; color: #ffffff; margin: 0; padding: 24px;">
<div style="max-width: 600px; margin: 0 auto; background-color: #1a1a1a; border-radius: 12px; padding: 32px;">
<h1 style="color: #E9CF6B; font-size: 22px;">Alpha Factory</h1>
{body}
<p style="color: #888888; font-size: 12px; margin-top: 32px;">
للاستفسار يرجى التواصل مع فريق الدعم على: {html.escape(settings.SUPPORT_EMAIL)}
</p>
</div>
</body>
</html>"""


class EmailService:
    """
    Клиент Resend.

    Args:
        api_key: Ключ Resend (по умолчанию из настроек)
        sender: Адрес отправителя
        retry_delay: Базовая задержка между попытками в секундах
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        retry_delay: float = 1.0,
        timeout: float = 15.0,
    ):
        self.api_key = settings.RESEND_API_KEY if api_key is None else api_key
        self.sender = sender or settings.EMAIL_FROM
        self.retry_delay = retry_delay
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[list[dict[str, str]]] = None,
    ) -> str:
        """
        Отправляет одно письмо.

        Returns:
            ID письма в Resend

        Raises:
            EmailError: ключ не задан, ошибка сети или ответ провайдера с ошибкой
        """
        if not self.is_configured:
            raise EmailError("Email service not configured")

        payload: dict[str, Any] = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html_body,
            "headers": {
                "X-Entity-Ref-ID": f"{category or 'message'}-{int(time.time() * 1000)}",
                "List-Unsubscribe": f"<mailto:{settings.SUPPORT_EMAIL}?subject=Unsubscribe>",
                "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
            },
        }
        if text:
            payload["text"] = text
        all_tags = list(tags or [])
        if category:
            all_tags.insert(0, {"name": "category", "value": category})
        if all_tags:
            payload["tags"] = all_tags

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    RESEND_API_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            raise EmailError(f"Resend request failed: {e}") from e

        if response.status_code >= 400:
            raise EmailError(f"Resend API error {response.status_code}: {response.text}")

        data = response.json()
        message_id = data.get("id", "")
        logger.info(f"Письмо отправлено: {to}, id={message_id}")
        return message_id

    async def _send_quietly(self, to: str, subject: str, html_body: str, **kwargs: Any) -> bool:
        try:
            await self.send(to, subject, html_body, **kwargs)
            return True
        except EmailError as e:
            logger.error(f"Ошибка отправки письма на {to}: {e}")
            return False

    # ==================== Коды подтверждения ====================

    async def send_otp_email(self, email: str, code: str) -> str:
        """Письмо с кодом подтверждения. Ошибки пробрасываются (EmailError)."""
        body = f"""
<p>رمز التحقق الخاص بك هو:</p>
<p style="font-size: 32px; letter-spacing: 8px; color: #E9CF6B; font-weight: bold;">{html.escape(code)}</p>
<p>ينتهي هذا الرمز خلال 5 دقائق.</p>
"""
        return await self.send(
            email,
            OTP_SUBJECT,
            _layout(OTP_SUBJECT, body),
            text=f"رمز التحقق الخاص بك هو: {code}\nينتهي هذا الرمز خلال 5 دقائق.",
            category="otp",
        )

    # ==================== Напоминания о счетах ====================

    async def send_invoice_reminder(self, to: str, user_name: str, reminder_type: str) -> bool:
        """
        Напоминание о неоплаченном счёте (через 3, 7 или 10 дней).

        Returns:
            False для некорректного адреса, неизвестного типа или ошибки отправки
        """
        if not to or "@" not in to:
            logger.error(f"Некорректный email для напоминания: {to}")
            return False
        if reminder_type not in REMINDER_TITLES:
            logger.error(f"Неизвестный тип напоминания: {reminder_type}")
            return False

        title = REMINDER_TITLES[reminder_type]
        message = REMINDER_MESSAGES[reminder_type]
        final = reminder_type == "10"
        color = "#ff4444" if final else "#E9CF6B"
        closing = (
            "لإعادة تفعيل حسابك، يرجى التواصل مع فريق الدعم وتسديد المبلغ المستحق."
            if final
            else "نرجو منك تسديد الفاتورة في أسرع وقت ممكن لتجنب أي انقطاع في الخدمة."
        )

        body = f"""
<h2 style="color: {color};">{html.escape(title)}</h2>
<p>مرحباً {html.escape(user_name)}،</p>
<p>{html.escape(message)}</p>
<ul>
<li>بعد 3 أيام من التأخير: تذكير ودي{" ← أنت هنا" if reminder_type == "3" else ""}</li>
<li>بعد 7 أيام من التأخير: تذكير عاجل وتحذير من التعليق{" ← أنت هنا" if reminder_type == "7" else ""}</li>
<li>بعد 10 أيام من التأخير: تعليق الحساب تلقائياً{" ← أنت هنا" if final else ""}</li>
</ul>
<p>{closing}</p>
"""
        text = f"مرحباً {user_name}،\n\n{message}\n\n{closing}\n\nمع التقدير،\nفريق Alpha Factory"

        logger.info(f"Отправка {reminder_type}-дневного напоминания: {user_name} <{to}>")
        return await self._send_quietly(
            to,
            title,
            _layout(title, body),
            text=text,
            category="invoice-reminder",
            tags=[{"name": "reminder-type", "value": reminder_type}],
        )

    # ==================== Доступы новых участников ====================

    @staticmethod
    def _credentials_text(user: UserCredentials) -> str:
        invite = user.telegram_invite_link or "رابط المجموعة غير متوفر حالياً"
        return f"""Alpha Factory BETA - معلومات حسابك

١. الانضمام الى مجموعة تليجرام لمتابعة التحديثات والاشعارات بشكل فوري
{invite}

٢. تسجيل الدخول الى منصة ألفا فاكتوري لبدء العمل
{settings.BASE_URL}/

بيانات الدخول الخاصة بك:
الاسم: {user.name}
البريد الإلكتروني: {user.email}
اسم المستخدم: {user.username}
كلمة المرور: {user.password}
المجموعة: {user.group_name}
الدور: {role_in_arabic(user.role)}

⚠️ احتفظ بهذه المعلومات في مكان آمن ولا تشاركها مع أحد."""

    async def send_credentials_email(self, user: UserCredentials, max_retries: int = 2) -> bool:
        """Письмо с логином и паролем; повторяет попытку с экспоненциальной задержкой."""
        if not is_email(user.email):
            logger.error(f"Некорректный email, письмо не отправлено: {user.email}")
            return False

        text = self._credentials_text(user)
        body = "".join(f"<p>{html.escape(line)}</p>" for line in text.splitlines() if line.strip())
        page = _layout(CREDENTIALS_SUBJECT, body)

        for attempt in range(1, max_retries + 1):
            logger.info(f"Попытка {attempt}/{max_retries} отправить доступы на {user.email}")
            if await self._send_quietly(user.email, CREDENTIALS_SUBJECT, page, text=text, category="user-credentials"):
                return True
            if attempt < max_retries:
                await asyncio.sleep(self.retry_delay * 2 ** attempt)
        return False

    async def send_credentials_emails(self, users: list[UserCredentials]) -> BulkEmailResult:
        """Рассылка доступов всем участникам группы."""
        summary = BulkEmailResult()
        for user in users:
            if await self.send_credentials_email(user):
                summary.successful += 1
                summary.results.append({"email": user.email, "success": True})
            else:
                summary.failed += 1
                reason = "Invalid email format" if not is_email(user.email) else "Check Resend API response in logs"
                summary.results.append({
                    "email": user.email,
                    "success": False,
                    "error": f"Failed to send email - {reason}",
                })
        logger.info(f"Рассылка доступов завершена: {summary.successful} успешно, {summary.failed} с ошибкой")
        return summary

    # ==================== Проекты ====================

    async def send_client_project_notification(
        self,
        client_name: str,
        client_email: str,
        project_title: str,
        project_type: str,
        project_date: str,
    ) -> bool:
        """Письмо клиенту о том, что съёмка проекта завершена."""
        subject = f"تم استلام مشروعك: {project_title} - Alpha Factory"
        body = f"""
<p>مرحباً {html.escape(client_name)}،</p>
<p>تم الانتهاء من تصوير مشروعك وبدأ فريقنا العمل عليه.</p>
<ul>
<li>المشروع: {html.escape(project_title)}</li>
<li>النوع: {html.escape(project_type)}</li>
<li>التاريخ: {html.escape(project_date)}</li>
</ul>
"""
        return await self._send_quietly(client_email, subject, _layout(subject, body), category="project-notification")

    async def send_project_deadline_reminder(
        self,
        client_name: str,
        client_email: str,
        project_title: str,
        project_type: str,
        project_date: str,
        days_overdue: int,
    ) -> bool:
        """Напоминание клиенту о просроченной съёмке."""
        subject = f"تذكير: موعد تصوير مشروع {project_title} - Alpha Factory"
        body = f"""
<p>مرحباً {html.escape(client_name)}،</p>
<p>مضى {days_overdue} يوم على الموعد المحدد لتصوير مشروعك ولم يتم الانتهاء منه بعد.</p>
<ul>
<li>المشروع: {html.escape(project_title)}</li>
<li>النوع: {html.escape(project_type)}</li>
<li>التاريخ: {html.escape(project_date)}</li>
</ul>
<p>يرجى تحديث حالة التصوير في لوحة التحكم.</p>
"""
        return await self._send_quietly(client_email, subject, _layout(subject, body), category="deadline-reminder")


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Dependency для FastAPI (переопределяется в тестах)."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
