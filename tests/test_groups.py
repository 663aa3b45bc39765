"""Tests for work groups: creation with generated credentials, Telegram setup and deletion."""

from sqlalchemy import select

from alpha_factory.auth.jwt import verify_password
from alpha_factory.db.models import Group, User
from alpha_factory.services.telegram import telegram_group_name
from alpha_factory.services.users import get_credential_account


def group_payload(**overrides):
    payload = {
        "groupName": "Riyadh Studio",
        "users": [
            {"name": "Khalid Client", "email": "khalid@example.com", "role": "client"},
            {"name": "Mona Editor", "email": "Mona@Example.com", "role": "editor"},
        ],
        "telegramChatId": "-100777",
    }
    payload.update(overrides)
    return payload


def test_telegram_group_name():
    assert telegram_group_name("Riyadh") == "Alpha Factory - Riyadh"


async def test_create_group(client, make_user, auth_headers, mailer, notifier, session_factory):
    """Test creating a group with members, Telegram invite and credential emails."""
    admin = await make_user("admin")

    response = await client.post("/api/admin/groups", json=group_payload(), headers=await auth_headers(admin))

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Group and users created successfully"
    assert data["group"]["name"] == "Riyadh Studio"
    assert data["group"]["telegramChatId"] == "-100777"
    assert data["group"]["telegramInviteLink"] == "https://t.me/+testInvite"
    assert data["group"]["telegramGroupName"] == "Alpha Factory - Riyadh Studio"
    assert {u["email"] for u in data["users"]} == {"khalid@example.com", "mona@example.com"}
    assert data["emailResults"] == {"successful": 2, "failed": 0}
    assert data["telegram"] == {
        "configured": True,
        "groupCreated": True,
        "chatId": "-100777",
        "inviteLink": "https://t.me/+testInvite",
        "error": None,
    }

    credentials = {c["email"]: c for c in data["credentials"]}
    editor_credentials = credentials["mona@example.com"]
    assert editor_credentials["username"].startswith("monaededi")
    assert editor_credentials["role"] == "editor"

    async with session_factory() as session:
        editor = (await session.execute(select(User).where(User.email == "mona@example.com"))).scalar_one()
        account = await get_credential_account(session, editor.id)
        assert verify_password(editor_credentials["password"], account.password)
        assert editor.group_id == data["group"]["id"]

    emails = mailer.by_category("user-credentials")
    assert len(emails) == 2
    assert all("https://t.me/+testInvite" in m["text"] for m in emails)

    [welcome] = notifier.messages()
    assert str(welcome.chat_id) == "-100777"
    assert "Riyadh Studio" in welcome.text


async def test_create_group_without_telegram(client, make_user, auth_headers, notifier, mailer):
    """Test that group creation works when the bot is not configured."""
    notifier.token = ""
    supervisor = await make_user("supervisor")

    response = await client.post("/api/admin/groups", json=group_payload(), headers=await auth_headers(supervisor))

    data = response.json()
    assert data["group"]["telegramChatId"] is None
    assert data["telegram"]["configured"] is False
    assert data["telegram"]["groupCreated"] is False
    assert data["telegram"]["inviteLink"] is None
    assert all("رابط المجموعة غير متوفر حالياً" in m["text"] for m in mailer.by_category("user-credentials"))


async def test_create_group_telegram_failure_still_creates_group(client, make_user, auth_headers, notifier):
    notifier.bot_session.fail_invites = True
    admin = await make_user("admin")

    response = await client.post("/api/admin/groups", json=group_payload(), headers=await auth_headers(admin))

    data = response.json()
    assert response.status_code == 200
    assert data["telegram"]["groupCreated"] is False
    assert "chat not found" in data["telegram"]["error"]
    assert data["group"]["telegramChatId"] is None


async def test_create_group_email_failures_are_reported(client, make_user, auth_headers, mailer):
    mailer.fail = True
    admin = await make_user("admin")

    response = await client.post("/api/admin/groups", json=group_payload(), headers=await auth_headers(admin))

    assert response.json()["emailResults"] == {"successful": 0, "failed": 2}


async def test_create_group_validation(client, make_user, auth_headers):
    admin = await make_user("admin")
    headers = await auth_headers(admin)

    response = await client.post("/api/admin/groups", json={"groupName": "X", "users": []}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Group name and users are required"

    response = await client.post(
        "/api/admin/groups",
        json={"groupName": "X", "users": [{"name": "A", "email": "a@example.com"}]},
        headers=headers,
    )
    assert response.json()["error"] == "Name and role are required for all users"

    response = await client.post(
        "/api/admin/groups",
        json={"groupName": "X", "users": [{"name": "A", "role": "client"}]},
        headers=headers,
    )
    assert response.json()["error"] == "Email is required for all users"


async def test_create_group_existing_email(client, make_user, auth_headers, db):
    admin = await make_user("admin")
    await make_user("client", email="khalid@example.com")

    response = await client.post("/api/admin/groups", json=group_payload(), headers=await auth_headers(admin))

    assert response.status_code == 409
    assert response.json()["error"] == "البريد الإلكتروني مستخدم مسبقاً: khalid@example.com"
    assert (await db.execute(select(Group))).scalars().all() == []


async def test_create_group_duplicate_emails_in_request(client, make_user, auth_headers, db):
    admin = await make_user("admin")
    users = [
        {"name": "Khalid Client", "email": "khalid@example.com", "role": "client"},
        {"name": "Khalid Editor", "email": "Khalid@Example.com", "role": "editor"},
    ]

    response = await client.post(
        "/api/admin/groups",
        json=group_payload(users=users),
        headers=await auth_headers(admin),
    )

    assert response.status_code == 409
    assert response.json()["error"] == "البريد الإلكتروني مكرر في الطلب: khalid@example.com"
    assert (await db.execute(select(Group))).scalars().all() == []


async def test_groups_require_manager_role(client, make_user, auth_headers):
    response = await client.get("/api/admin/groups", headers=await auth_headers(await make_user("client")))

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


async def test_list_groups(client, make_user, make_group, auth_headers):
    group = await make_group("Jeddah Crew", telegram_chat_id="-1001")
    await make_user("editor", name="Member", group_id=group.id)
    owner = await make_user("owner")

    response = await client.get("/api/admin/groups", headers=await auth_headers(owner))

    [listed] = response.json()["groups"]
    assert listed["name"] == "Jeddah Crew"
    assert listed["telegramChatId"] == "-1001"
    assert [u["name"] for u in listed["users"]] == ["Member"]


async def test_delete_group_removes_members(client, make_user, make_group, auth_headers, fetch):
    group = await make_group("Old Team")
    member = await make_user("editor", group_id=group.id)
    await make_user("client", group_id=group.id)
    admin = await make_user("admin")

    response = await client.request(
        "DELETE",
        "/api/admin/groups",
        json={"groupId": group.id},
        headers=await auth_headers(admin),
    )

    data = response.json()
    assert data["success"] is True
    assert data["message"] == 'Successfully deleted group "Old Team" and 2 user(s)'
    assert data["deletedGroup"] == {"id": group.id, "name": "Old Team", "userCount": 2}
    assert await fetch(Group, group.id) is None
    assert await fetch(User, member.id) is None
    assert await fetch(User, admin.id) is not None


async def test_delete_group_errors(client, make_user, auth_headers):
    headers = await auth_headers(await make_user("admin"))

    response = await client.request("DELETE", "/api/admin/groups", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Group ID is required"

    response = await client.request("DELETE", "/api/admin/groups", json={"groupId": "missing"}, headers=headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Group not found"


async def test_configure_group_telegram(client, make_user, make_group, auth_headers, notifier, fetch):
    group = await make_group("Dammam Team")
    await make_user("designer", group_id=group.id)
    admin = await make_user("admin")

    response = await client.put(
        f"/api/admin/groups/{group.id}/telegram",
        json={"telegramChatId": "-100321"},
        headers=await auth_headers(admin),
    )

    data = response.json()
    assert data["message"] == "Telegram configuration added successfully"
    assert data["telegram"] == {
        "chatId": "-100321",
        "inviteLink": "https://t.me/+testInvite",
        "groupName": "Alpha Factory - Dammam Team",
    }
    stored = await fetch(Group, group.id)
    assert stored.telegram_chat_id == "-100321"
    assert len(notifier.messages()) == 1


async def test_configure_group_telegram_errors(client, make_user, make_group, auth_headers, notifier):
    group = await make_group("Dammam Team")
    headers = await auth_headers(await make_user("admin"))

    response = await client.put(f"/api/admin/groups/{group.id}/telegram", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Telegram chat ID is required"

    response = await client.put("/api/admin/groups/missing/telegram", json={"telegramChatId": "-1"}, headers=headers)
    assert response.status_code == 404

    notifier.bot_session.fail_invites = True
    response = await client.put(f"/api/admin/groups/{group.id}/telegram", json={"telegramChatId": "-1"}, headers=headers)
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to configure Telegram: Bad Request: chat not found"
