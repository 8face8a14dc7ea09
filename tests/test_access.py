import pytest

from scribo.errors import ForbiddenError
from scribo.features.notes.access import can_access, is_owner, require_access, require_owner
from scribo.features.notes.domain import SharePermission
from tests.helpers import OWNER, grant, make_note


@pytest.mark.parametrize("permission", ["read", "write", SharePermission.READ, SharePermission.WRITE])
def test_owner_always_has_access(permission):
    note = make_note()
    assert can_access(note, OWNER, permission) is True


@pytest.mark.parametrize("permission", ["read", "write"])
def test_unrelated_user_has_no_access(permission):
    note = make_note(shared_with=[grant("reader", "read"), grant("writer", "write")])
    assert can_access(note, "stranger", permission) is False


def test_read_grant_allows_read_only():
    note = make_note(shared_with=[grant("reader", "read")])

    assert can_access(note, "reader", "read") is True
    assert can_access(note, "reader", "write") is False


def test_write_grant_allows_read_and_write():
    note = make_note(shared_with=[grant("writer", "write")])

    assert can_access(note, "writer", "read") is True
    assert can_access(note, "writer", "write") is True


def test_default_permission_is_read():
    note = make_note(shared_with=[grant("reader", "read")])
    assert can_access(note, "reader") is True


def test_is_owner_ignores_grants():
    note = make_note(shared_with=[grant("writer", "write")])

    assert is_owner(note, OWNER) is True
    assert is_owner(note, "writer") is False


def test_require_access_message_names_the_action():
    note = make_note(shared_with=[grant("reader", "read")])

    with pytest.raises(ForbiddenError) as exc_info:
        require_access(note, "reader", "write", action="update")

    assert exc_info.value.message == "Not authorized to update this note"
    assert exc_info.value.status_code == 403


def test_require_owner_rejects_write_grant_holder():
    note = make_note(shared_with=[grant("writer", "write")])

    with pytest.raises(ForbiddenError) as exc_info:
        require_owner(note, "writer", "share")

    assert exc_info.value.message == "Only the note owner can share this note"


def test_unknown_permission_is_rejected():
    note = make_note()
    with pytest.raises(ValueError):
        can_access(note, OWNER, "admin")
