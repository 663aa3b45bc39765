# -*- coding: utf-8 -*-
"""
API роутер проектов.

Эндпоинты:
- POST / - Создание проекта клиентом
- GET / - Проекты, доступные текущему пользователю
- GET /{project_id} - Один проект
- PUT /{project_id} - Обновление полей проекта
- DELETE /{project_id} - Удаление проекта
- PUT /{project_id}/assign - Назначение монтажёра, дизайнера и проверяющего

Изменения проекта публикуются в Telegram-чат группы.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.database import get_db_session
from alpha_factory.db.models import (
    FILMING_DONE,
    ROLE_CLIENT,
    ROLE_DESIGNER,
    ROLE_EDITOR,
    ROLE_REVIEWER,
    TEAM_ROLES,
    Group,
    Project,
    User,
)
from alpha_factory.models.project import AssignmentRequest, ProjectCreate, ProjectResponse, ProjectUpdate
from alpha_factory.services.email import EmailService, get_email_service
from alpha_factory.services.telegram import (
    NewProjectInfo,
    StatusChange,
    TelegramNotifier,
    get_telegram_notifier,
)
from alpha_factory.utils.dates import parse_datetime

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.projects")

NOT_SET = "غير محدد"

# Роль -> (поле проекта, текст ошибки, подпись для уведомления)
ASSIGNMENT_FIELDS = {
    ROLE_EDITOR: ("editor_id", "Invalid editor ID or user is not an editor", "كمحرر", "المحرر"),
    ROLE_DESIGNER: ("designer_id", "Invalid designer ID or user is not a designer", "كمصمم", "المصمم"),
    ROLE_REVIEWER: ("reviewer_id", "Invalid reviewer ID or user is not a reviewer", "كمراجع", "المراجع"),
}


async def _load_project(db: AsyncSession, project_id: str) -> Optional[Project]:
    """Загружает проект со связанными пользователями и группой."""
    result = await db.execute(
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _first_group_member(db: AsyncSession, group_id: str, role: str) -> Optional[User]:
    """Первый по дате создания участник группы с ролью."""
    result = await db.execute(
        select(User)
        .where(User.group_id == group_id, User.role == role)
        .order_by(User.created_at, User.id)
        .limit(1)
    )
    return result.scalars().first()


async def _get_project_or_404(db: AsyncSession, project_id: str) -> Project:
    project = await _load_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def _same_group(project: Project, user: User) -> bool:
    return user.group_id is not None and project.group_id == user.group_id


def can_view(project: Project, user: User) -> bool:
    """Администратор, клиент-владелец, назначенный участник или участник той же группы."""
    return (
        user.is_admin
        or project.client_id == user.id
        or user.id in (project.editor_id, project.designer_id, project.reviewer_id)
        or _same_group(project, user)
    )


def can_update(project: Project, user: User) -> bool:
    if user.is_admin or project.client_id == user.id:
        return True
    assigned = {
        ROLE_EDITOR: project.editor_id,
        ROLE_DESIGNER: project.designer_id,
        ROLE_REVIEWER: project.reviewer_id,
    }
    if user.role not in assigned:
        return False
    return assigned[user.role] == user.id or _same_group(project, user)


def can_delete(project: Project, user: User) -> bool:
    return user.is_admin or project.client_id == user.id


@router.post("")
async def create_project(
    data: ProjectCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Создаёт проект от имени клиента.

    Первые монтажёр, дизайнер и проверяющий группы клиента назначаются
    автоматически; группа получает уведомление в Telegram.
    """
    if not data.title or not data.type or not data.filming_status or not data.date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: title, type, filmingStatus, date",
        )

    user = current_user.user
    if user.role != ROLE_CLIENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only clients can create projects")

    project = Project(
        title=data.title,
        type=data.type,
        filming_status=data.filming_status,
        file_links=data.file_links,
        notes=data.notes,
        date=data.date,
        start_date=parse_datetime(data.date),
        voice_note_url=data.voice_note_url,
        client_id=user.id,
        group_id=user.group_id,
    )
    # Пустые значения оставляют статусы по умолчанию
    for field in ("edit_mode", "design_mode", "review_mode", "verification_mode"):
        value = getattr(data, field)
        if value:
            setattr(project, field, value)

    group = await db.get(Group, user.group_id) if user.group_id else None
    if group is not None:
        for role, (field, *_rest) in ASSIGNMENT_FIELDS.items():
            member = await _first_group_member(db, group.id, role)
            if member is not None:
                setattr(project, field, member.id)

    db.add(project)
    await db.flush()
    project = await _load_project(db, project.id)

    if group is not None and group.telegram_chat_id:
        sent = await notifier.send_new_project_notification(
            group.telegram_chat_id,
            NewProjectInfo(
                title=data.title,
                type=data.type,
                filming_status=data.filming_status,
                date=data.date,
                client_name=user.name,
                notes=data.notes,
                file_links=data.file_links,
                voice_note_url=data.voice_note_url,
            ),
        )
        if not sent:
            logger.error(f"Не удалось отправить уведомление о проекте {data.title} в Telegram")
    else:
        logger.info(f"У группы клиента {user.email} нет Telegram-чата, уведомление не отправлено")

    if data.filming_status == FILMING_DONE:
        await mailer.send_client_project_notification(
            client_name=user.name,
            client_email=user.email,
            project_title=data.title,
            project_type=data.type,
            project_date=data.date,
        )

    logger.info(f"Создан проект {project.id} клиентом {user.email}")
    return {
        "success": True,
        "project": ProjectResponse.model_validate(project).dump(),
        "message": "Project created successfully",
    }


@router.get("")
async def list_projects(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Проекты по роли: клиент видит свои, команда назначенные и групповые, администратор все."""
    user = current_user.user
    query = select(Project).order_by(Project.created_at.desc())

    if user.role == ROLE_CLIENT:
        query = query.where(Project.client_id == user.id)
    elif user.role in TEAM_ROLES:
        assigned_column = getattr(Project, ASSIGNMENT_FIELDS[user.role][0])
        conditions = [assigned_column == user.id]
        if user.group_id:
            conditions.append(Project.group_id == user.group_id)
        query = query.where(or_(*conditions))
    elif not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid user role")

    result = await db.execute(query)
    projects = result.scalars().all()
    return {
        "success": True,
        "projects": [ProjectResponse.model_validate(p).dump() for p in projects],
    }


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await _get_project_or_404(db, project_id)
    if not can_view(project, current_user.user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied to this project")
    return {"success": True, "project": ProjectResponse.model_validate(project).dump()}


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
):
    """
    Обновляет переданные поля проекта.

    По каждому реально изменённому полю в чат группы уходит отдельное сообщение.
    """
    user = current_user.user
    project = await _get_project_or_404(db, project_id)
    if not can_update(project, user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to update this project",
        )

    changes: list[tuple[str, object, object]] = []
    for field in data.model_fields_set:
        value = getattr(data, field)
        if field in ("start_date", "end_date"):
            if value:
                setattr(project, field, parse_datetime(value))
            continue
        if value is None:
            continue
        old_value = getattr(project, field)
        setattr(project, field, value)
        if old_value != value:
            changes.append((field, old_value, value))

    await db.flush()
    project_title = project.title
    chat_id = project.group.telegram_chat_id if project.group else None
    project = await _load_project(db, project_id)

    if chat_id:
        for field, old_value, new_value in changes:
            await notifier.send_project_status_update(
                chat_id,
                StatusChange(
                    project_title=project_title,
                    updated_by=user.name or "Unknown User",
                    user_role=user.role or "unknown",
                    field_name=field,
                    old_value=str(old_value or NOT_SET),
                    new_value=str(new_value or NOT_SET),
                ),
            )

    return {
        "success": True,
        "project": ProjectResponse.model_validate(project).dump(),
        "message": "Project updated successfully",
    }


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await _get_project_or_404(db, project_id)
    if not can_delete(project, current_user.user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to delete this project",
        )

    await db.delete(project)
    logger.info(f"Проект {project_id} удалён пользователем {current_user.user.email}")
    return {"success": True, "message": "Project deleted successfully"}


@router.put("/{project_id}/assign")
async def assign_team(
    project_id: str,
    data: AssignmentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    notifier: TelegramNotifier = Depends(get_telegram_notifier),
):
    """Назначает или снимает участников команды проекта (только администратор)."""
    user = current_user.user
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can assign team members")

    project = await _get_project_or_404(db, project_id)

    messages: list[str] = []
    for role, (field, error, assigned_label, role_label) in ASSIGNMENT_FIELDS.items():
        if field not in data.model_fields_set:
            continue
        member_id = getattr(data, field)
        if member_id:
            member = await db.get(User, member_id)
            if member is None or member.role != role:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)
            setattr(project, field, member_id)
            messages.append(f"تم تعيين {member.name} {assigned_label}")
        else:
            setattr(project, field, None)
            messages.append(f"تم إلغاء تعيين {role_label}")

    await db.flush()
    group = project.group
    project_title = project.title
    project = await _load_project(db, project_id)

    if group is not None and group.telegram_chat_id and messages:
        details = "\n".join(
            [f"المشروع: {project_title}", f"بواسطة: {user.name} (مدير)"]
            + [f"• {m}" for m in messages]
        )
        await notifier.send_project_update(group.telegram_chat_id, "تحديث التعيينات", details, group.name)

    return {
        "success": True,
        "project": ProjectResponse.model_validate(project).dump(),
        "message": "Team members assigned successfully",
    }
