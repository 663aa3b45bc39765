# -*- coding: utf-8 -*-
"""
Pydantic схемы для проектов.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from alpha_factory.models.common import CamelModel, GroupBrief, UserBrief


# ==================== Запросы ====================

class ProjectCreate(CamelModel):
    """Создание проекта клиентом."""
    title: Optional[str] = Field(None, description="Название")
    type: Optional[str] = Field(None, description="Тип проекта")
    filming_status: Optional[str] = Field(None, description="Статус съёмки")
    date: Optional[str] = Field(None, description="Дата съёмки")
    file_links: Optional[str] = Field(None, description="Ссылки на файлы")
    notes: Optional[str] = Field(None, description="Заметки")
    voice_note_url: Optional[str] = Field(None, description="Голосовая заметка")
    edit_mode: Optional[str] = Field(None, description="Статус монтажа")
    design_mode: Optional[str] = Field(None, description="Статус дизайна")
    review_mode: Optional[str] = Field(None, description="Статус проверки")
    verification_mode: Optional[str] = Field(None, description="Оценка проекта")


class ProjectUpdate(CamelModel):
    """Частичное обновление проекта: меняются только переданные поля."""
    title: Optional[str] = None
    type: Optional[str] = None
    filming_status: Optional[str] = None
    file_links: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    edit_mode: Optional[str] = None
    review_mode: Optional[str] = None
    design_mode: Optional[str] = None
    verification_mode: Optional[str] = None
    review_links: Optional[str] = None
    design_links: Optional[str] = None
    documentation: Optional[str] = None
    video_duration: Optional[str] = None
    voice_note_url: Optional[str] = None


class AssignmentRequest(CamelModel):
    """Назначение команды; null снимает назначение, отсутствие поля ничего не меняет."""
    editor_id: Optional[str] = None
    designer_id: Optional[str] = None
    reviewer_id: Optional[str] = None


# ==================== Ответы ====================

class ProjectResponse(CamelModel):
    id: str
    title: str
    type: str
    filming_status: str
    file_links: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    edit_mode: str
    review_mode: str
    design_mode: str
    verification_mode: str
    review_links: Optional[str] = None
    design_links: Optional[str] = None
    documentation: Optional[str] = None
    video_duration: Optional[str] = None
    voice_note_url: Optional[str] = None
    client_id: str
    group_id: Optional[str] = None
    editor_id: Optional[str] = None
    designer_id: Optional[str] = None
    reviewer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client: Optional[UserBrief] = None
    editor: Optional[UserBrief] = None
    designer: Optional[UserBrief] = None
    reviewer: Optional[UserBrief] = None
    group: Optional[GroupBrief] = None
