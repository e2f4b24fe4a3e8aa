"""Authorization Guard — tests for ownership and user-profile access rules."""

from uuid import uuid4

import pytest

from taskvault.core.authorization import (
    Caller, can_view_user, ensure_can_update_user, ensure_can_view_user,
    ensure_owned,
)
from taskvault.core.errors import AccessDeniedError, ResourceNotFoundError


def test_owner_passes():
    caller = Caller(id=uuid4())
    ensure_owned(caller, caller.id, "task", uuid4())


@pytest.mark.parametrize("owner_id", [None, uuid4()])
def test_missing_or_foreign_rows_look_the_same(owner_id):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        ensure_owned(Caller(id=uuid4()), owner_id, "task", uuid4())
    assert exc_info.value.message == "Task not found"
    assert exc_info.value.http_status == 404


def test_admin_gets_no_ownership_bypass():
    with pytest.raises(ResourceNotFoundError):
        ensure_owned(Caller(id=uuid4(), is_admin=True), uuid4(), "category", uuid4())


def test_profile_view_rules():
    me, other = uuid4(), uuid4()
    assert can_view_user(Caller(id=me), me)
    assert not can_view_user(Caller(id=me), other)
    assert can_view_user(Caller(id=me, is_admin=True), other)
    with pytest.raises(AccessDeniedError):
        ensure_can_view_user(Caller(id=me), other)


def test_profile_update_is_self_only_even_for_admins():
    me = uuid4()
    ensure_can_update_user(Caller(id=me), me)
    with pytest.raises(AccessDeniedError) as exc_info:
        ensure_can_update_user(Caller(id=me, is_admin=True), uuid4())
    assert exc_info.value.http_status == 403
