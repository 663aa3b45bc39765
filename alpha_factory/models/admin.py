# -*- coding: utf-8 -*-
"""
Pydantic схемы для администрирования: пользователи, группы, приостановка.
"""

from typing import Optional

from pydantic import Field

from alpha_factory.models.common import CamelModel


# ==================== Приостановка ====================

class SuspendUserRequest(CamelModel):
    user_id: Optional[str] = Field(None, description="ID пользователя")
    reason: Optional[str] = Field(None, description="Причина приостановки")


class AutoSuspendRequest(CamelModel):
    user_id: Optional[str] = Field(None, description="ID пользователя")
    invoice_due_date: Optional[str] = Field(None, description="Срок оплаты счёта")


# ==================== Пользователи ====================

class UserUpdateRequest(CamelModel):
    email: Optional[str] = Field(None, description="Новый email")
    name: Optional[str] = Field(None, description="Новое имя")
    phone: Optional[str] = Field(None, description="Новый телефон")


class ChangePasswordRequest(CamelModel):
    new_password: Optional[str] = Field(None, description="Новый пароль")


# ==================== Группы ====================

class GroupMemberCreate(CamelModel):
    name: Optional[str] = Field(None, description="Имя участника")
    email: Optional[str] = Field(None, description="Email участника")
    role: Optional[str] = Field(None, description="Роль участника")


class GroupCreateRequest(CamelModel):
    group_name: Optional[str] = Field(None, description="Название группы")
    users: list[GroupMemberCreate] = Field(default_factory=list, description="Участники")
    telegram_chat_id: Optional[str] = Field(None, description="ID чата Telegram")


class GroupDeleteRequest(CamelModel):
    group_id: Optional[str] = Field(None, description="ID группы")


class GroupTelegramRequest(CamelModel):
    telegram_chat_id: Optional[str] = Field(None, description="ID чата Telegram")


# ==================== Панель владельца ====================

class AccountMemberCreate(GroupMemberCreate):
    phone: Optional[str] = Field(None, description="Телефон участника")


class AccountsCreateRequest(CamelModel):
    users: list[AccountMemberCreate] = Field(default_factory=list, description="Новые пользователи")
    group_name: Optional[str] = Field(None, description="Название новой группы")
    group_id: Optional[str] = Field(None, description="ID существующей группы")
    telegram_chat_id: Optional[str] = Field(None, description="ID чата Telegram для новой группы")


class StandaloneAccountsRequest(CamelModel):
    users: list[GroupMemberCreate] = Field(default_factory=list, description="Новые пользователи без группы")


# ==================== Уведомления ====================

class NotificationRequest(CamelModel):
    type: Optional[str] = Field(None, description="task_completion, project_update или admin_mention")
    task_type: Optional[str] = Field(None, description="Тип выполненной задачи")
    message: Optional[str] = Field(None, description="Текст обновления")
    project_id: Optional[str] = Field(None, description="ID проекта")


# ==================== Диагностика ====================

class UserEmailRequest(CamelModel):
    user_email: Optional[str] = Field(None, description="Email пользователя")


class ManualSuspendRequest(CamelModel):
    user_email: Optional[str] = Field(None, description="Email пользователя")
    reason: Optional[str] = Field(None, description="Причина")


class SendEmailDirectRequest(CamelModel):
    reminder_type: Optional[str] = Field(None, description="Тип напоминания: 3, 7 или 10")
    user_email: Optional[str] = Field(None, description="Email получателя")
    user_name: Optional[str] = Field(None, description="Имя получателя")


class CheckPasswordRequest(CamelModel):
    email: Optional[str] = Field(None, description="Email пользователя")
    test_password: Optional[str] = Field(None, description="Пароль для проверки")
