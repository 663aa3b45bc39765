"""Tests for sign-in, sessions, role redirects and email verification codes."""

from datetime import timedelta

from sqlalchemy import select

from alpha_factory.auth.jwt import create_session_token, hash_token, pwd_context
from alpha_factory.auth.otp import otp_key
from alpha_factory.db.base import new_id, utcnow
from alpha_factory.db.models import Session
from alpha_factory.services.users import get_credential_account

from tests.conftest import DEFAULT_PASSWORD


async def test_sign_in_returns_token_user_and_cookie(client, make_user):
    """Test signing in with email and password."""
    user = await make_user(role="client", name="Sara", email="sara@example.com")

    response = await client.post(
        "/api/auth/sign-in/email",
        json={"email": "Sara@Example.com", "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["redirect"] == "/client"
    assert data["user"]["id"] == user.id
    assert data["user"]["emailVerified"] is False
    assert response.cookies.get("alpha_session") == data["token"]


async def test_sign_in_creates_session_row(client, make_user, db):
    """Test that a successful sign-in stores only the token hash."""
    user = await make_user()

    response = await client.post(
        "/api/auth/sign-in/email",
        json={"email": user.email, "password": DEFAULT_PASSWORD},
    )
    token = response.json()["token"]

    result = await db.execute(select(Session).where(Session.user_id == user.id))
    session = result.scalar_one()
    assert session.token_hash == hash_token(token)
    assert session.token_hash != token


async def test_sign_in_requires_email_and_password(client):
    """Test that missing credentials are rejected."""
    response = await client.post("/api/auth/sign-in/email", json={"email": "a@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "البريد الإلكتروني وكلمة المرور مطلوبان"}


async def test_sign_in_wrong_password(client, make_user):
    """Test that a wrong password returns 401."""
    user = await make_user()

    response = await client.post(
        "/api/auth/sign-in/email",
        json={"email": user.email, "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "بيانات الدخول غير صحيحة"


async def test_sign_in_accepts_legacy_bcrypt_hash(client, make_user, session_factory):
    """Test that passwords hashed with bcrypt before the migration still work."""
    user = await make_user(role="editor")
    async with session_factory() as session:
        account = await get_credential_account(session, user.id)
        account.password = pwd_context.hash(DEFAULT_PASSWORD, scheme="bcrypt")
        await session.commit()

    response = await client.post(
        "/api/auth/sign-in/email",
        json={"email": user.email, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200
    assert response.json()["redirect"] == "/editor"


async def test_session_without_token(client):
    """Test that anonymous session returns a null user."""
    response = await client.get("/api/auth/session")

    assert response.status_code == 200
    assert response.json() == {"user": None}


async def test_session_with_token(client, make_user, auth_headers):
    """Test that the session endpoint returns the signed-in user."""
    user = await make_user(role="designer", username="designer1")
    headers = await auth_headers(user)

    response = await client.get("/api/auth/session", headers=headers)

    assert response.json()["user"]["username"] == "designer1"
    assert response.json()["user"]["role"] == "designer"


async def test_expired_session_is_rejected(client, make_user, session_factory):
    """Test that an expired session row does not authenticate."""
    user = await make_user()
    session_id = new_id()
    expires_at = utcnow() + timedelta(days=1)
    token = create_session_token(user.id, session_id, expires_at)
    async with session_factory() as session:
        session.add(Session(
            id=session_id,
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=utcnow() - timedelta(minutes=1),
        ))
        await session.commit()

    response = await client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})

    assert response.json() == {"user": None}


async def test_signout_deletes_session(client, make_user, auth_headers):
    """Test that signing out invalidates the token."""
    user = await make_user()
    headers = await auth_headers(user)

    response = await client.post("/api/auth/signout", headers=headers)
    assert response.json() == {"success": True}

    response = await client.get("/api/auth/session", headers=headers)
    assert response.json() == {"user": None}


async def test_callback_redirects_by_role(client, make_user, auth_headers):
    """Test the post-login redirect for each role."""
    for role, path in [("owner", "/admin"), ("admin", "/admin"), ("reviewer", "/reviewer"), ("client", "/client")]:
        user = await make_user(role=role)
        headers = await auth_headers(user)

        response = await client.get("/api/auth/callback", headers=headers)

        assert response.status_code == 307
        assert response.headers["location"] == path


async def test_callback_post_uses_see_other(client, make_user, auth_headers):
    """Test that POST callback redirects with 303."""
    user = await make_user(role="editor")
    headers = await auth_headers(user)

    response = await client.post("/api/auth/callback", headers=headers)

    assert response.status_code == 303
    assert response.headers["location"] == "/editor"


async def test_callback_without_session_or_role_goes_home(client, make_user, auth_headers):
    """Test that anonymous users and users without a role go to the home page."""
    response = await client.get("/api/auth/callback")
    assert response.headers["location"] == "/"

    user = await make_user(role=None)
    response = await client.get("/api/auth/callback", headers=await auth_headers(user))
    assert response.headers["location"] == "/"


async def test_check_suspension(client, make_user, auth_headers):
    """Test the suspension status for active and suspended accounts."""
    response = await client.get("/api/auth/check-suspension")
    assert response.status_code == 401

    active = await make_user()
    response = await client.get("/api/auth/check-suspension", headers=await auth_headers(active))
    assert response.json() == {"suspended": False, "message": "الحساب نشط"}

    suspended = await make_user(suspended=True, suspended_at=utcnow(), suspension_reason="late payment")
    response = await client.get("/api/auth/check-suspension", headers=await auth_headers(suspended))
    data = response.json()
    assert data["suspended"] is True
    assert data["suspensionReason"] == "late payment"
    assert data["suspendedAt"]


async def test_find_user_by_username_and_email(client, make_user):
    """Test resolving the sign-in identifier to an email."""
    await make_user(email="omar@example.com", username="omarcli123")

    response = await client.post("/api/auth/find-user", json={"identifier": "omarcli123"})
    assert response.json() == {"email": "omar@example.com"}

    response = await client.post("/api/auth/find-user", json={"identifier": "OMAR@example.com"})
    assert response.json() == {"email": "omar@example.com"}


async def test_find_user_errors(client):
    """Test missing and unknown identifiers."""
    response = await client.post("/api/auth/find-user", json={"identifier": "  "})
    assert response.status_code == 400
    assert response.json()["error"] == "Identifier is required"

    response = await client.post("/api/auth/find-user", json={"identifier": "nobody"})
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


async def test_verify_credentials(client, make_user):
    """Test checking a password without creating a session."""
    user = await make_user()

    response = await client.post(
        "/api/auth/verify-credentials",
        json={"email": user.email, "password": DEFAULT_PASSWORD},
    )
    assert response.json() == {"success": True}
    assert "alpha_session" not in response.cookies

    response = await client.post(
        "/api/auth/verify-credentials",
        json={"email": user.email, "password": "nope"},
    )
    assert response.status_code == 401


async def test_send_and_verify_otp(client, mailer):
    """Test that the emailed code verifies once."""
    response = await client.post("/api/auth/send-otp", json={"email": "new@example.com"})
    assert response.json() == {"success": True}

    [message] = mailer.by_category("otp")
    assert message["to"] == "new@example.com"
    code = message["text"].split(": ")[1].splitlines()[0]
    assert len(code) == 6

    response = await client.post("/api/auth/verify-otp", json={"email": "new@example.com", "otp": code})
    assert response.json() == {"success": True}

    response = await client.post("/api/auth/verify-otp", json={"email": "new@example.com", "otp": code})
    assert response.status_code == 400
    assert response.json()["error"] == "رمز التحقق غير موجود أو منتهي الصلاحية"


async def test_verify_otp_wrong_code(client, otp_store):
    """Test that a wrong code is rejected."""
    code = await otp_store.issue("a@example.com")
    wrong = "000000" if code != "000000" else "111111"

    response = await client.post("/api/auth/verify-otp", json={"email": "a@example.com", "otp": wrong})

    assert response.status_code == 400
    assert response.json()["error"] == "رمز التحقق غير صحيح"


async def test_verify_otp_arabic_digits(client, otp_store):
    await otp_store.issue("a@example.com")

    response = await client.post("/api/auth/verify-otp", json={"email": "a@example.com", "otp": "١٢٣٤٥٦"})

    assert response.status_code == 400
    assert response.json()["error"] == "رمز التحقق غير صحيح"


async def test_verify_otp_requires_fields(client):
    response = await client.post("/api/auth/verify-otp", json={"email": "a@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "البريد الإلكتروني ورمز التحقق مطلوبان"


async def test_send_otp_without_email_service(client, mailer):
    """Test that OTP sending fails when Resend is not configured."""
    mailer.api_key = ""

    response = await client.post("/api/auth/send-otp", json={"email": "a@example.com"})

    assert response.status_code == 500
    assert response.json()["error"] == "Email service not configured"


async def test_send_otp_provider_failure_discards_code(client, mailer, redis_client):
    """Test that a failed send does not leave a usable code behind."""
    mailer.fail = True

    response = await client.post("/api/auth/send-otp", json={"email": "a@example.com"})

    assert response.status_code == 500
    assert response.json()["error"] == "حدث خطأ في إرسال رمز التحقق"
    assert await redis_client.get(otp_key("a@example.com")) is None
