"""Tests for voice note upload and download."""

import pytest

from alpha_factory.config import settings


@pytest.fixture
def voice_dir(tmp_path, monkeypatch):
    directory = tmp_path / "voice"
    monkeypatch.setattr(settings, "VOICE_UPLOAD_DIR", str(directory))
    return directory


async def test_upload_and_download_voice_note(client, make_user, auth_headers, voice_dir):
    user = await make_user("client")

    response = await client.post(
        "/api/voice-upload",
        files={"audio": ("note.webm", b"webm-bytes", "audio/webm")},
        headers=await auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["filename"].startswith(f"voice_{user.id}_")
    assert data["filename"].endswith(".webm")
    assert data["publicUrl"] == f"/api/voice-file/{data['filename']}"
    assert data["url"] == f"http://testserver{data['publicUrl']}"
    assert (voice_dir / data["filename"]).read_bytes() == b"webm-bytes"

    response = await client.get(data["publicUrl"])

    assert response.status_code == 200
    assert response.content == b"webm-bytes"
    assert response.headers["content-type"] == "audio/webm"
    assert response.headers["cache-control"] == "public, max-age=3600"


async def test_upload_requires_audio(client, make_user, auth_headers, voice_dir):
    response = await client.post(
        "/api/voice-upload",
        files={"file": ("note.webm", b"x", "audio/webm")},
        headers=await auth_headers(await make_user()),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}


async def test_upload_requires_session(client, voice_dir):
    response = await client.post("/api/voice-upload", files={"audio": ("note.webm", b"x", "audio/webm")})

    assert response.status_code == 401


async def test_voice_file_errors(client, voice_dir):
    response = await client.get("/api/voice-file/bad..name.webm")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid filename"}

    response = await client.get("/api/voice-file/note.mp3")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid file type"}

    response = await client.get("/api/voice-file/voice_missing.webm")
    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}
