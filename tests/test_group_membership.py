# tests/test_group_membership.py
# Сервис членства: роли, коды приглашения, активная группа, атомарность.

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from src.models.group import Group
from src.models.group_member import GroupMember, GroupRole
from src.models.user import User
from src.services import group_membership as gm
from src.services.errors import Forbidden, NotFound, TransactionFailure, ValidationError


def _member_count(db, group_id):
    return db.scalar(select(func.count(GroupMember.id)).where(GroupMember.group_id == group_id))


def _count(db, model):
    return db.scalar(select(func.count()).select_from(model))


def test_create_group_makes_creator_owner_with_single_member(db, make_user):
    alice = make_user("Alice")
    group = gm.create_group(db, "Smiths", alice)

    membership = gm.get_membership(db, group.id, alice.id)
    assert membership is not None
    assert membership.role == GroupRole.owner
    assert _member_count(db, group.id) == 1
    assert group.created_by == alice.id


def test_create_group_keeps_existing_active_group(db, make_user):
    alice = make_user("Alice")
    default_group_id = alice.active_group_id

    gm.create_group(db, "Smiths", alice)
    db.refresh(alice)

    assert alice.active_group_id == default_group_id


def test_create_group_activates_when_user_has_no_active_group(db):
    user = User(google_id="g-raw", name="Raw")
    db.add(user)
    db.commit()

    group = gm.create_group(db, "Raw's Kitchen", user)
    db.refresh(user)

    assert user.active_group_id == group.id


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_group_rejects_blank_name(db, make_user, name):
    alice = make_user("Alice")
    before = _count(db, Group)

    with pytest.raises(ValidationError) as exc:
        gm.create_group(db, name, alice)

    assert exc.value.code == "name_required"
    assert _count(db, Group) == before


def test_create_group_is_atomic_when_membership_insert_fails(db, make_user, monkeypatch):
    alice = make_user("Alice")
    before = _count(db, Group)

    def _boom(*args, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(gm, "_add_membership", _boom)

    with pytest.raises(TransactionFailure) as exc:
        gm.create_group(db, "Smiths", alice)

    # наружу не уходит текст драйвера
    assert "disk full" not in exc.value.message
    assert _count(db, Group) == before


def test_join_group_is_idempotent(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)

    first, joined_first = gm.join_group(db, bob, group.invite_code)
    second, joined_second = gm.join_group(db, bob, group.invite_code)

    assert first.id == second.id == group.id
    assert joined_first is True
    assert joined_second is False
    rows = db.scalar(
        select(func.count(GroupMember.id)).where(
            GroupMember.group_id == group.id, GroupMember.user_id == bob.id
        )
    )
    assert rows == 1
    assert gm.get_membership(db, group.id, bob.id).role == GroupRole.member


def test_join_group_accepts_full_invite_link(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)

    joined_group, joined = gm.join_group(db, bob, f"  https://menu.example.com/join/{group.invite_code}  ")

    assert joined is True
    assert joined_group.id == group.id


@pytest.mark.parametrize("code", ["nope-nope", "", None])
def test_join_group_unknown_code_is_not_found(db, make_user, code):
    bob = make_user("Bob")

    with pytest.raises(NotFound) as exc:
        gm.join_group(db, bob, code)

    assert exc.value.code == "invalid_invite_code"


def test_join_does_not_override_existing_active_group(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    bobs_default = bob.active_group_id
    group = gm.create_group(db, "Smiths", alice)

    gm.join_group(db, bob, group.invite_code)
    db.refresh(bob)

    assert bob.active_group_id == bobs_default


def test_join_activates_group_for_user_without_active_group(db, make_user):
    alice = make_user("Alice")
    group = gm.create_group(db, "Smiths", alice)
    user = User(google_id="g-raw", name="Raw")
    db.add(user)
    db.commit()

    gm.join_group(db, user, group.invite_code)
    db.refresh(user)

    assert user.active_group_id == group.id


def test_remove_member_clears_active_group_when_it_was_active(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)
    gm.switch_active_group(db, bob, group.id)
    db.refresh(bob)
    assert bob.active_group_id == group.id

    assert gm.remove_member(db, group.id, bob.id, alice) is True
    db.refresh(bob)

    assert bob.active_group_id is None
    assert gm.get_membership(db, group.id, bob.id) is None


def test_remove_member_keeps_active_group_when_other_group_was_active(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    bobs_default = bob.active_group_id
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)

    gm.remove_member(db, group.id, bob.id, alice)
    db.refresh(bob)

    assert bob.active_group_id == bobs_default


def test_member_can_leave_on_their_own(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)

    assert gm.remove_member(db, group.id, bob.id, bob) is True
    assert _member_count(db, group.id) == 1


def test_non_owner_cannot_remove_someone_else(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)
    gm.join_group(db, carol, group.invite_code)

    with pytest.raises(Forbidden) as exc:
        gm.remove_member(db, group.id, carol.id, bob)

    assert exc.value.code == "not_group_owner"
    assert _member_count(db, group.id) == 3


def test_removing_non_member_is_a_no_op(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)

    assert gm.remove_member(db, group.id, bob.id, alice) is False
    assert _member_count(db, group.id) == 1


def test_switch_to_foreign_group_is_forbidden_and_keeps_pointer(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    bobs_default = bob.active_group_id
    group = gm.create_group(db, "Smiths", alice)

    with pytest.raises(Forbidden) as exc:
        gm.switch_active_group(db, bob, group.id)

    assert exc.value.code == "not_group_member"
    db.refresh(bob)
    assert bob.active_group_id == bobs_default


def test_switch_active_group_for_member(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)

    gm.switch_active_group(db, bob, group.id)
    db.refresh(bob)

    assert bob.active_group_id == group.id
    active = gm.get_active_group(db, bob)
    assert active["id"] == group.id
    assert active["role"] == "member"
    assert active["member_count"] == 2


def test_get_active_group_is_none_without_pointer(db):
    user = User(google_id="g-raw", name="Raw")
    db.add(user)
    db.commit()

    assert gm.get_active_group(db, user) is None


def test_regenerate_invite_code_invalidates_old_code(db, make_user, monkeypatch):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    old_code = group.invite_code

    new_code = gm.regenerate_invite_code(db, group.id, alice)

    assert new_code != old_code
    with pytest.raises(NotFound):
        gm.join_group(db, bob, old_code)
    joined_group, joined = gm.join_group(db, bob, new_code)
    assert joined is True and joined_group.id == group.id


def test_only_owner_can_regenerate_invite_code(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)
    old_code = group.invite_code

    with pytest.raises(Forbidden):
        gm.regenerate_invite_code(db, group.id, bob)

    db.refresh(group)
    assert group.invite_code == old_code


def test_list_members_owners_first_and_members_only(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    outsider = make_user("Eve")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)

    members = gm.list_members(db, group.id, bob)

    assert [m["id"] for m in members] == [alice.id, bob.id]
    assert [m["role"] for m in members] == ["owner", "member"]
    with pytest.raises(Forbidden):
        gm.list_members(db, group.id, outsider)


def test_list_groups_reports_role_and_live_member_count(db, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    group = gm.create_group(db, "Smiths", alice)
    gm.join_group(db, bob, group.invite_code)

    groups = {g["id"]: g for g in gm.list_groups(db, bob)}

    assert set(groups) == {bob.active_group_id, group.id}
    assert groups[group.id]["role"] == "member"
    assert groups[group.id]["member_count"] == 2
    assert groups[bob.active_group_id]["role"] == "owner"


def test_smiths_scenario(db, make_user, monkeypatch):
    alice = make_user("A")
    bob = make_user("B")
    monkeypatch.setattr("src.services.invite_code.generate_invite_code", lambda: "X7f2Qa")

    group = gm.create_group(db, "Smiths", alice)
    assert group.invite_code == "X7f2Qa"

    _, joined = gm.join_group(db, bob, "X7f2Qa")
    assert joined is True
    assert gm.get_membership(db, group.id, bob.id).role == GroupRole.member
    assert _member_count(db, group.id) == 2

    gm.remove_member(db, group.id, bob.id, alice)
    assert gm.get_membership(db, group.id, bob.id) is None
    assert _member_count(db, group.id) == 1


def test_invite_code_retry_gives_up_after_collisions(db, make_user, monkeypatch):
    alice = make_user("Alice")
    monkeypatch.setattr("src.services.invite_code.generate_invite_code", lambda: "X7f2Qa")
    gm.create_group(db, "Smiths", alice)

    with pytest.raises(TransactionFailure) as exc:
        gm.create_group(db, "Joneses", alice)

    assert exc.value.code == "invite_code_exhausted"
