"""Tests for Telegram notifications sent by group members."""

import pytest


@pytest.fixture
async def member(make_user, make_group):
    group = await make_group("Team Delta", telegram_chat_id="-100444")
    return await make_user("editor", name="Yousef Editor", group_id=group.id)


async def test_task_completion_notification(client, member, auth_headers, notifier):
    payload = {"type": "task_completion", "taskType": "مونتاج الفيديو"}

    response = await client.post("/api/notifications", json=payload, headers=await auth_headers(member))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Notification sent successfully"}
    [message] = notifier.messages()
    assert str(message.chat_id) == "-100444"
    assert "Yousef Editor" in message.text
    assert "مونتاج الفيديو" in message.text
    assert "@admin" in message.text


async def test_project_update_notification(client, member, auth_headers, notifier):
    payload = {"type": "project_update", "message": "تم رفع النسخة النهائية"}

    response = await client.post("/api/notifications", json=payload, headers=await auth_headers(member))

    assert response.status_code == 200
    [message] = notifier.messages()
    assert "تحديث عام" in message.text
    assert "تم رفع النسخة النهائية" in message.text
    assert "Team Delta" in message.text


async def test_admin_mention_notification(client, member, auth_headers, notifier):
    response = await client.post("/api/notifications", json={"type": "admin_mention"},
                                 headers=await auth_headers(member))

    assert response.status_code == 200
    [message] = notifier.messages()
    assert "طلب مراجعة" in message.text


@pytest.mark.parametrize("payload, error", [
    ({}, "Notification type is required"),
    ({"type": "task_completion"}, "Task type is required for task completion notifications"),
    ({"type": "project_update"}, "Message is required for project update notifications"),
    ({"type": "broadcast"}, "Invalid notification type"),
])
async def test_notification_validation(client, member, auth_headers, notifier, payload, error):
    response = await client.post("/api/notifications", json=payload, headers=await auth_headers(member))

    assert response.status_code == 400
    assert response.json() == {"error": error}
    assert notifier.messages() == []


async def test_notification_without_group(client, make_user, auth_headers):
    editor = await make_user("editor")

    response = await client.post("/api/notifications", json={"type": "admin_mention"},
                                 headers=await auth_headers(editor))

    assert response.status_code == 404
    assert response.json() == {"error": "User group not found"}


async def test_notification_group_without_chat(client, make_user, make_group, auth_headers):
    group = await make_group("Team Epsilon")
    editor = await make_user("editor", group_id=group.id)

    response = await client.post("/api/notifications", json={"type": "admin_mention"},
                                 headers=await auth_headers(editor))

    assert response.status_code == 400
    assert response.json() == {"error": "Telegram group not configured for this project"}


async def test_notification_send_failure(client, member, auth_headers, notifier):
    notifier.token = ""

    response = await client.post("/api/notifications", json={"type": "admin_mention"},
                                 headers=await auth_headers(member))

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send notification"}


async def test_notification_requires_session(client):
    response = await client.post("/api/notifications", json={"type": "admin_mention"})

    assert response.status_code == 401


async def test_list_notifications(client, member, auth_headers):
    response = await client.get("/api/notifications", headers=await auth_headers(member))

    assert response.status_code == 200
    data = response.json()
    assert data["group"]["name"] == "Team Delta"
    assert data["group"]["telegramConfigured"] is True
    assert data["user"] == {"id": member.id, "name": "Yousef Editor", "role": "editor"}
    assert [n["type"] for n in data["availableNotifications"]] == [
        "task_completion", "project_update", "admin_mention",
    ]
