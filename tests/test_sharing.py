from datetime import timedelta

import pytest

from scribo.errors import ForbiddenError, NotFoundError, SelfShareError, UserNotFoundError
from scribo.features.notes.access import can_access
from scribo.features.notes.domain import NoteCreate, SharePermission
from scribo.features.notes.sharing import share_with, unshare_from
from tests.conftest import ALICE, BOB, CAROL
from tests.helpers import CREATED, OWNER, grant, make_note


# ============================================================================
# In-memory registry
# ============================================================================

def test_share_with_adds_grant():
    note = make_note()

    created = share_with(note, "reader", "read", now=CREATED)

    assert note.shared_with == [created]
    assert created.permission == SharePermission.READ
    assert created.shared_at == CREATED


def test_sharing_twice_updates_grant_in_place():
    note = make_note()
    share_with(note, "user-2", "read", now=CREATED)

    later = CREATED + timedelta(hours=1)
    updated = share_with(note, "user-2", "write", now=later)

    assert len(note.shared_with) == 1
    assert updated.permission == SharePermission.WRITE
    assert updated.shared_at == later
    assert can_access(note, "user-2", "write")


def test_cannot_share_with_owner():
    note = make_note()

    with pytest.raises(SelfShareError):
        share_with(note, OWNER, "read")

    assert note.shared_with == []


def test_unshare_removes_grant():
    note = make_note(shared_with=[grant("user-2"), grant("user-3", "write")])

    assert unshare_from(note, "user-2") is True
    assert [g.user_id for g in note.shared_with] == ["user-3"]
    assert not can_access(note, "user-2", "read")


def test_unshare_absent_user_is_noop():
    note = make_note(shared_with=[grant("user-2")])

    assert unshare_from(note, "nobody") is False
    assert len(note.shared_with) == 1


# ============================================================================
# Service with persistence
# ============================================================================

async def test_share_by_email_is_case_insensitive(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))

    shared = await note_service.share_note(note.id, ALICE, "write", email="bob@EXAMPLE.com")

    assert [(g.user_id, g.permission) for g in shared.shared_with] == [(BOB, SharePermission.WRITE)]
    assert await note_service.check_access(note.id, BOB, "write") is True


async def test_reshare_keeps_single_grant_after_reload(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))
    await note_service.share_note(note.id, ALICE, "read", target_user_id=BOB)
    await note_service.share_note(note.id, ALICE, "write", target_user_id=BOB)

    reloaded = await note_service.get_note(note.id, ALICE)

    assert len(reloaded.shared_with) == 1
    assert reloaded.shared_with[0].permission == SharePermission.WRITE


async def test_share_advances_updated_at(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))

    shared = await note_service.share_note(note.id, ALICE, "read", target_user_id=BOB)

    assert shared.updated_at >= note.updated_at
    assert shared.last_modified >= note.created_at


async def test_share_with_unknown_user(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))

    with pytest.raises(UserNotFoundError):
        await note_service.share_note(note.id, ALICE, "read", email="nobody@example.com")


async def test_share_with_self_via_email(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))

    with pytest.raises(SelfShareError):
        await note_service.share_note(note.id, ALICE, "read", email="alice@example.com")


async def test_only_owner_can_share(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))
    await note_service.share_note(note.id, ALICE, "write", target_user_id=BOB)

    with pytest.raises(ForbiddenError):
        await note_service.share_note(note.id, BOB, "read", target_user_id=CAROL)


async def test_unshare_revokes_access(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))
    await note_service.share_note(note.id, ALICE, "read", target_user_id=BOB)

    updated = await note_service.unshare_note(note.id, ALICE, BOB)

    assert updated.shared_with == []
    with pytest.raises(ForbiddenError):
        await note_service.get_note(note.id, BOB)


async def test_cannot_share_note_in_recycle_bin(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))
    await note_service.soft_delete(note.id, ALICE)

    with pytest.raises(NotFoundError):
        await note_service.share_note(note.id, ALICE, "read", target_user_id=BOB)


async def test_check_access_with_malformed_id(note_service):
    with pytest.raises(NotFoundError):
        await note_service.check_access("not-a-uuid", ALICE, "read")


async def test_check_access_hides_notes_from_unrelated_users(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))

    with pytest.raises(NotFoundError):
        await note_service.check_access(note.id, CAROL, "read")


async def test_check_access_hides_binned_notes_from_grantees(note_service):
    note = await note_service.create_note(ALICE, NoteCreate(title="Plan"))
    await note_service.share_note(note.id, ALICE, "write", target_user_id=BOB)
    await note_service.soft_delete(note.id, ALICE)

    with pytest.raises(NotFoundError):
        await note_service.check_access(note.id, BOB, "read")
    assert await note_service.check_access(note.id, ALICE, "write") is True
