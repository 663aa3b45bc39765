# -*- coding: utf-8 -*-
"""
Напоминания клиентам о просроченной съёмке.

Запускается ежедневно (cron): письмо уходит один раз, когда
дата проекта прошла ровно один день назад, а съёмка не завершена.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alpha_factory.db.base import utcnow
from alpha_factory.db.models import FILMING_DONE, Project
from alpha_factory.services.email import EmailService
from alpha_factory.utils.dates import parse_datetime

logger = logging.getLogger(__name__)

REMINDER_DAY = 1


def calculate_days_overdue(date_string: Optional[str], today: Optional[date] = None) -> int:
    """Разница в календарных днях между сегодня и датой проекта (0 при ошибке разбора)."""
    parsed = parse_datetime(date_string)
    if parsed is None:
        logger.warning(f"Не удалось разобрать дату проекта: {date_string!r}")
        return 0
    today = today or utcnow().date()
    return (today - parsed.date()).days


async def _projects_with_incomplete_filming(db: AsyncSession) -> list[Project]:
    result = await db.execute(select(Project).where(Project.filming_status != FILMING_DONE))
    return list(result.scalars().all())


def _project_row(project: Project, overdue: int) -> dict[str, Any]:
    return {
        "id": project.id,
        "title": project.title,
        "type": project.type,
        "date": project.date,
        "filmingStatus": project.filming_status,
        "clientName": project.client.name if project.client else None,
        "clientEmail": project.client.email if project.client else None,
        "daysOverdue": overdue,
    }


async def list_overdue_projects(db: AsyncSession, today: Optional[date] = None) -> dict[str, Any]:
    """Отчёт о просроченных проектах без отправки писем."""
    projects = await _projects_with_incomplete_filming(db)
    overdue_projects = []
    for project in projects:
        overdue = calculate_days_overdue(project.date, today)
        if overdue > 0:
            row = _project_row(project, overdue)
            row["wouldSendReminder"] = overdue == REMINDER_DAY
            overdue_projects.append(row)

    return {
        "success": True,
        "totalProjectsChecked": len(projects),
        "overdueProjectsFound": len(overdue_projects),
        "projectsEligibleForReminder": sum(1 for p in overdue_projects if p["wouldSendReminder"]),
        "overdueProjects": overdue_projects,
    }


async def send_overdue_reminders(
    db: AsyncSession,
    mailer: EmailService,
    today: Optional[date] = None,
    delay: float = 0.1,
) -> dict[str, Any]:
    """
    Отправляет напоминания по проектам, просроченным ровно на один день.

    Returns:
        Сводка: totalProjectsChecked, overdueProjectsFound, remindersSent,
        remindersFailed, results
    """
    projects = await _projects_with_incomplete_filming(db)
    logger.info(f"Проектов с незавершённой съёмкой: {len(projects)}")

    due = [p for p in projects if calculate_days_overdue(p.date, today) == REMINDER_DAY]
    logger.info(f"Просрочено ровно на {REMINDER_DAY} день: {len(due)}")

    results = []
    sent = failed = 0
    for project in due:
        client = project.client
        ok = await mailer.send_project_deadline_reminder(
            client_name=client.name,
            client_email=client.email,
            project_title=project.title,
            project_type=project.type,
            project_date=project.date or "",
            days_overdue=REMINDER_DAY,
        )
        entry = {"projectTitle": project.title, "clientEmail": client.email}
        if ok:
            sent += 1
            entry["status"] = "sent"
        else:
            failed += 1
            entry.update({"status": "failed", "error": "Email sending failed"})
        results.append(entry)
        if delay:
            await asyncio.sleep(delay)

    summary = {
        "totalProjectsChecked": len(projects),
        "overdueProjectsFound": len(due),
        "remindersSent": sent,
        "remindersFailed": failed,
        "results": results,
    }
    logger.info(f"Проверка просроченных проектов завершена: отправлено {sent}, ошибок {failed}")
    return summary
