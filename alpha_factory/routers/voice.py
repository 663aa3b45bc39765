# -*- coding: utf-8 -*-
"""
API роутер голосовых заметок к проектам.

Эндпоинты:
- POST /voice-upload - Загрузка записи (multipart, поле audio)
- GET /voice-file/{filename} - Отдача записи
"""

import logging
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse

from alpha_factory.auth.dependencies import CurrentUser, get_current_user
from alpha_factory.config import settings
from alpha_factory.utils.security import is_safe_filename

router = APIRouter()
logger = logging.getLogger("alpha_factory.routers.voice")

VOICE_EXTENSION = ".webm"
VOICE_MEDIA_TYPE = "audio/webm"


def voice_dir() -> Path:
    return Path(settings.VOICE_UPLOAD_DIR)


@router.post("/voice-upload")
async def upload_voice(
    request: Request,
    audio: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Сохраняет запись как voice_<userId>_<ms>.webm и возвращает её адрес."""
    if audio is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No audio file provided")

    upload_dir = voice_dir()
    upload_dir.mkdir(parents=True, exist_ok=True)

    filename = f"voice_{current_user.id}_{int(time.time() * 1000)}{VOICE_EXTENSION}"
    filepath = upload_dir / filename
    filepath.write_bytes(await audio.read())

    public_url = f"/api/voice-file/{filename}"
    full_url = str(request.base_url).rstrip("/") + public_url
    logger.info(f"Голосовая заметка сохранена: {filepath}")

    return {
        "success": True,
        "url": full_url,
        "filename": filename,
        "publicUrl": public_url,
    }


@router.get("/voice-file/{filename}")
async def get_voice_file(filename: str):
    """Отдаёт запись; кэш на час."""
    if not is_safe_filename(filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filename")
    if not filename.endswith(VOICE_EXTENSION):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file type")

    filepath = voice_dir() / filename
    if not filepath.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(
        filepath,
        media_type=VOICE_MEDIA_TYPE,
        headers={"Cache-Control": "public, max-age=3600"},
    )
