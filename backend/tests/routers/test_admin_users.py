from datetime import datetime, timezone
from typing import cast

import pytest
from app.models import User, UserRole
from app.routers import admin as router
from sqlalchemy.ext.asyncio import AsyncSession


class DummySession:
    async def __aenter__(self) -> "DummySession":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> bool:
        return False

    def begin(self) -> "DummySession":
        return self


def _user(user_id: int, role: UserRole) -> User:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return User(
        id=user_id,
        email=f"user{user_id}@example.com",
        name=f"User {user_id}",
        phone=None,
        role=role,
        password_hash="pbkdf2$secret",
        auth_provider="local",
        auth_provider_id=None,
        created_at=now,
        updated_at=now,
    )


class DummyUserRepo:
    def __init__(self, session: object) -> None:
        self.session = session
        self.users = [_user(1, UserRole.ADMIN), _user(2, UserRole.USER), _user(3, UserRole.USER)]

    async def list_users(self, role: UserRole | None = None) -> list[User]:
        return [u for u in self.users if role is None or u.role == role]


@pytest.mark.asyncio
async def test_list_users_hides_password_hash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(router, "SqlAlchemyUserRepository", DummyUserRepo)

    result = await router.list_users(role=None, session=cast(AsyncSession, DummySession()))

    assert [u.user_id for u in result] == [1, 2, 3]
    assert all("password_hash" not in u.model_dump() for u in result)
    assert result[0].role == UserRole.ADMIN


@pytest.mark.asyncio
async def test_list_users_filters_by_role(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(router, "SqlAlchemyUserRepository", DummyUserRepo)

    result = await router.list_users(role=UserRole.USER, session=cast(AsyncSession, DummySession()))

    assert [u.user_id for u in result] == [2, 3]
