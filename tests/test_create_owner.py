"""Tests for the initial owner account setup."""

import pytest

from alpha_factory.auth.jwt import verify_password
from alpha_factory.db.models import ROLE_OWNER
from alpha_factory.services.users import OwnerSetupError, create_owner, get_credential_account


async def test_create_owner(db):
    owner = await create_owner(db, "Owner", "Owner@Example.com", "ownerpass")
    await db.commit()

    assert owner.role == ROLE_OWNER
    assert owner.email_verified is True
    account = await get_credential_account(db, owner.id)
    assert verify_password("ownerpass", account.password)


async def test_second_owner_is_rejected(db):
    await create_owner(db, "Owner", "owner@example.com", "ownerpass")

    with pytest.raises(OwnerSetupError, match="Owner account already exists"):
        await create_owner(db, "Other", "other@example.com", "ownerpass")


async def test_owner_email_must_be_free(db, make_user):
    await make_user("admin", email="taken@example.com")

    with pytest.raises(OwnerSetupError, match="Email already exists"):
        await create_owner(db, "Owner", "taken@example.com", "ownerpass")
