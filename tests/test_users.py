from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import PreconditionError
from app.repositories.users import UserRepository


def test_upsert_twice_keeps_one_user(store):
    users = UserRepository(store)
    first = users.upsert({"open_id": "abc", "name": "Ana", "email": "ana@example.com"})
    second = users.upsert({"open_id": "abc", "name": "Ana Maria"})

    assert first == second
    assert len(users.list_all()) == 1
    user = users.get_by_open_id("abc")
    assert user.name == "Ana Maria"
    assert user.email == "ana@example.com"
    assert user.role == "user"
    assert user.is_active is True
    assert user.last_signed_in is not None


def test_owner_becomes_admin_on_insert_and_on_login(store):
    users = UserRepository(store, owner_open_id="owner-1")
    users.upsert({"open_id": "owner-1", "name": "Dono"})
    assert users.get_by_open_id("owner-1").role == "admin"

    users.update(users.get_by_open_id("owner-1").id, {"role": "user"})
    users.upsert({"open_id": "owner-1"})
    assert users.get_by_open_id("owner-1").role == "admin"


def test_explicit_role_wins(store):
    users = UserRepository(store, owner_open_id="owner-1")
    users.upsert({"open_id": "owner-1", "role": "financeiro"})
    assert users.get_by_open_id("owner-1").role == "financeiro"


def test_upsert_requires_open_id(store):
    with pytest.raises(PreconditionError):
        UserRepository(store).upsert({"name": "Sem id"})


def test_list_is_ordered_by_name_and_hides_inactive(store):
    users = UserRepository(store)
    users.upsert({"open_id": "1", "name": "Zeca"})
    users.upsert({"open_id": "2", "name": "Ágata"})
    inactive = users.upsert({"open_id": "3", "name": "Bia"})
    users.delete(inactive)

    assert [user.name for user in users.list()] == ["Ágata", "Zeca"]
    assert [user.name for user in users.list(include_inactive=True)] == ["Ágata", "Bia", "Zeca"]


def test_second_upsert_advances_last_signed_in(store):
    users = UserRepository(store)
    first_login = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
    second_login = first_login + timedelta(days=3)

    users.upsert({"open_id": "abc", "name": "Ana", "last_signed_in": first_login})
    assert users.get_by_open_id("abc").last_signed_in == first_login

    users.upsert({"open_id": "abc", "last_signed_in": second_login})
    user = users.get_by_open_id("abc")
    assert user.last_signed_in == second_login
    assert user.updated_at >= user.created_at


def test_second_upsert_without_timestamp_uses_now(store):
    users = UserRepository(store)
    stale = datetime(2020, 5, 1, tzinfo=timezone.utc)
    users.upsert({"open_id": "abc", "last_signed_in": stale})
    users.upsert({"open_id": "abc"})
    assert users.get_by_open_id("abc").last_signed_in > stale
