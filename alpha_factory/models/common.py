# -*- coding: utf-8 -*-
"""
Базовые Pydantic схемы.

Поля в Python в snake_case, в JSON в camelCase.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Схема с camelCase-алиасами и чтением из ORM-объектов."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> dict[str, Any]:
        """JSON-совместимый dict с camelCase ключами."""
        return self.model_dump(by_alias=True, mode="json")


# ==================== Ответы ====================

class UserBrief(CamelModel):
    """Краткая информация о пользователе (вложенная в проекты и группы)."""
    id: str
    name: str
    email: str
    role: Optional[str] = None


class GroupBrief(CamelModel):
    id: str
    name: str
    telegram_chat_id: Optional[str] = None


class UserResponse(CamelModel):
    """Пользователь в административных списках."""
    id: str
    name: str
    email: str
    username: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    group_id: Optional[str] = None
    email_verified: bool = False
    suspended: bool = False
    suspended_at: Optional[datetime] = None
    suspension_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GroupResponse(CamelModel):
    id: str
    name: str
    telegram_chat_id: Optional[str] = None
    telegram_invite_link: Optional[str] = None
    telegram_group_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    users: list[UserBrief] = Field(default_factory=list)
