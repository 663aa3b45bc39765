"""Tests for the owner panel: statistics and bulk account creation."""

from sqlalchemy import select

from alpha_factory.db.models import Group, User


async def test_stats(client, make_user, make_group, make_project, auth_headers):
    owner = await make_user("owner")
    group = await make_group()
    client_user = await make_user("client", group_id=group.id)
    await make_user("editor")
    await make_user("editor")
    await make_user("admin")
    await make_project(client_user)

    response = await client.get("/api/admin-panel/stats", headers=await auth_headers(owner))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "stats": {
            "totalUsers": 5,
            "totalGroups": 1,
            "totalProjects": 1,
            "adminUsers": 1,
            "clientUsers": 1,
            "editorUsers": 2,
            "designerUsers": 0,
            "reviewerUsers": 0,
        },
    }


async def test_stats_owner_only(client, make_user, auth_headers):
    admin = await make_user("admin")

    response = await client.get("/api/admin-panel/stats", headers=await auth_headers(admin))

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Owner access required"}


# ==================== Аккаунты ====================

async def test_create_accounts_with_new_group(client, make_user, auth_headers, mailer, notifier, session_factory):
    """Test creating accounts together with a new group and its Telegram invite."""
    owner = await make_user("owner")
    payload = {
        "groupName": "Jeddah Crew",
        "telegramChatId": "-100555",
        "users": [
            {"name": "Sara Client", "email": "sara@example.com", "role": "client", "phone": "+966500000001"},
            {"name": "Omar Designer", "email": "omar@example.com", "role": "designer"},
        ],
    }

    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == 'Successfully created 2 user(s) and group "Jeddah Crew"'
    assert data["telegramInviteLink"] == "https://t.me/+testInvite"
    credentials = {c["email"]: c for c in data["credentials"]}
    assert credentials["sara@example.com"]["phone"] == "+966500000001"
    assert credentials["omar@example.com"]["groupName"] == "Jeddah Crew"

    async with session_factory() as session:
        group = await session.get(Group, data["groupId"])
        assert group.telegram_chat_id == "-100555"
        assert group.telegram_group_name == "Alpha Factory - Jeddah Crew"
        sara = (await session.execute(select(User).where(User.email == "sara@example.com"))).scalar_one()
        assert sara.group_id == group.id
        assert sara.phone == "+966500000001"

    emails = {m["to"]: m for m in mailer.by_category("user-credentials")}
    assert "https://t.me/+testInvite" in emails["omar@example.com"]["text"]
    assert "https://t.me/+testInvite" not in emails["sara@example.com"]["text"]
    assert len(notifier.messages()) == 1


async def test_create_accounts_in_existing_group(client, make_user, make_group, auth_headers, notifier,
                                                 session_factory):
    """Test adding accounts to an existing group announces them in its chat."""
    owner = await make_user("owner")
    group = await make_group("Team Gamma", telegram_chat_id="-100321")
    async with session_factory() as session:
        stored = await session.get(Group, group.id)
        stored.telegram_invite_link = "https://t.me/+gamma"
        await session.commit()

    payload = {"groupId": group.id, "users": [{"name": "Lina Reviewer", "email": "lina@example.com", "role": "reviewer"}]}
    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Successfully created 1 user(s) and added to existing group"
    assert data["telegramInviteLink"] == "https://t.me/+gamma"
    assert data["groupId"] == group.id

    [announcement] = notifier.messages()
    assert str(announcement.chat_id) == "-100321"
    assert "Lina Reviewer" in announcement.text


async def test_create_accounts_requires_group(client, make_user, auth_headers):
    owner = await make_user("owner")
    payload = {"users": [{"name": "Lina", "email": "lina@example.com", "role": "reviewer"}]}

    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 400
    assert response.json() == {"error": "Either groupName or groupId is required"}


async def test_create_accounts_unknown_group(client, make_user, auth_headers):
    owner = await make_user("owner")
    payload = {"groupId": "missing", "users": [{"name": "Lina", "email": "lina@example.com", "role": "reviewer"}]}

    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 404
    assert response.json() == {"error": "Group not found"}


async def test_create_accounts_duplicate_phone_in_request(client, make_user, auth_headers, session_factory):
    owner = await make_user("owner")
    payload = {
        "groupName": "Dammam",
        "users": [
            {"name": "A", "email": "a@example.com", "role": "editor", "phone": "0500"},
            {"name": "B", "email": "b@example.com", "role": "editor", "phone": "0500"},
        ],
    }

    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 409
    assert response.json() == {"error": "رقم الهاتف مكرر في الطلب: 0500"}
    async with session_factory() as session:
        assert (await session.execute(select(Group))).scalars().all() == []


async def test_create_accounts_owner_only(client, make_user, auth_headers):
    supervisor = await make_user("supervisor")
    payload = {"groupName": "X", "users": [{"name": "A", "email": "a@example.com", "role": "editor"}]}

    response = await client.post("/api/admin-panel/accounts", json=payload, headers=await auth_headers(supervisor))

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Owner access required"}


async def test_create_standalone_accounts(client, make_user, auth_headers, mailer, session_factory):
    """Test that a supervisor can create staff accounts without a group."""
    supervisor = await make_user("supervisor")
    payload = {"users": [{"name": "Hadi Editor", "email": "hadi@example.com", "role": "editor"}]}

    response = await client.post(
        "/api/admin-panel/standalone-accounts", json=payload, headers=await auth_headers(supervisor)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Successfully created 1 standalone account(s)"
    [credentials] = data["credentials"]
    assert credentials["email"] == "hadi@example.com"
    assert credentials["role"] == "editor"
    assert "groupName" not in credentials

    async with session_factory() as session:
        hadi = (await session.execute(select(User).where(User.email == "hadi@example.com"))).scalar_one()
        assert hadi.group_id is None

    [email] = mailer.by_category("user-credentials")
    assert "Standalone Account" in email["text"]


async def test_standalone_accounts_reject_clients(client, make_user, auth_headers):
    owner = await make_user("owner")
    payload = {"users": [{"name": "Sara", "email": "sara@example.com", "role": "client"}]}

    response = await client.post("/api/admin-panel/standalone-accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 400
    assert response.json() == {
        "error": "Only admin, supervisor, editor, designer, and reviewer roles are allowed for standalone accounts"
    }


async def test_standalone_accounts_require_email(client, make_user, auth_headers):
    owner = await make_user("owner")
    payload = {"users": [{"name": "Hadi", "role": "editor"}]}

    response = await client.post("/api/admin-panel/standalone-accounts", json=payload, headers=await auth_headers(owner))

    assert response.status_code == 400
    assert response.json() == {"error": "Email is required for all standalone users"}
