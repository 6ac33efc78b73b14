# tests/test_identity.py
# Резолвер личности: первый вход, повторный вход, путь миграции старых пользователей.

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from src.models.group import Group
from src.models.group_member import GroupMember, GroupRole
from src.models.user import User
from src.schemas.user import ExternalProfile
from src.services import group_membership as gm
from src.services.errors import TransactionFailure
from src.services.identity import resolve_identity
from src.utils.user import default_group_name, get_display_name


def test_first_login_creates_exactly_one_owned_active_group(db):
    user = resolve_identity(db, ExternalProfile(external_id="sub-1", email="a@example.com", name="Alice"))

    memberships = db.scalars(select(GroupMember).where(GroupMember.user_id == user.id)).all()
    assert len(memberships) == 1
    assert memberships[0].role == GroupRole.owner
    assert db.scalar(select(func.count(Group.id))) == 1
    assert user.active_group_id == memberships[0].group_id


def test_priya_gets_priyas_menu(db):
    user = resolve_identity(db, ExternalProfile(external_id="sub-priya", name="Priya"))

    group = db.get(Group, user.active_group_id)
    assert group.name == "Priya's Menu"
    assert group.created_by == user.id


def test_repeat_login_updates_profile_without_new_group(db):
    first = resolve_identity(db, ExternalProfile(external_id="sub-1", name="Alice"))
    group_id = first.active_group_id

    again = resolve_identity(
        db,
        ExternalProfile(external_id="sub-1", name="Alice Smith", avatar_url="https://img.example.com/a.png"),
    )

    assert again.id == first.id
    assert again.name == "Alice Smith"
    assert again.avatar_url == "https://img.example.com/a.png"
    assert again.active_group_id == group_id
    assert db.scalar(select(func.count(Group.id))) == 1


def test_existing_user_without_groups_gets_default_group(db):
    legacy = User(google_id="sub-legacy", name="Legacy")
    db.add(legacy)
    db.commit()

    user = resolve_identity(db, ExternalProfile(external_id="sub-legacy", name="Legacy"))

    assert user.active_group_id is not None
    assert db.get(Group, user.active_group_id).name == "Legacy's Menu"


def test_existing_user_adopts_earliest_membership(db, make_user):
    alice = make_user("Alice")
    group = gm.create_group(db, "Smiths", alice)
    legacy = User(google_id="sub-legacy", name="Legacy")
    db.add(legacy)
    db.commit()
    gm.join_group(db, legacy, group.invite_code)
    # вступление уже выставило указатель; имитируем пользователя до миграции
    legacy.active_group_id = None
    db.commit()

    user = resolve_identity(db, ExternalProfile(external_id="sub-legacy", name="Legacy"))

    assert user.active_group_id == group.id
    assert db.scalar(select(func.count(GroupMember.id)).where(GroupMember.user_id == user.id)) == 1


def test_first_login_rolls_back_everything_on_store_failure(db, monkeypatch):
    def _boom(*args, **kwargs):
        raise SQLAlchemyError("constraint")

    monkeypatch.setattr(gm, "_add_membership", _boom)

    with pytest.raises(TransactionFailure):
        resolve_identity(db, ExternalProfile(external_id="sub-1", name="Alice"))

    assert db.scalar(select(func.count(User.id))) == 0
    assert db.scalar(select(func.count(Group.id))) == 0


@pytest.mark.parametrize(
    "name,email,external_id,expected",
    [
        ("  Priya ", None, "sub", "Priya"),
        (None, "sam@example.com", "sub", "sam"),
        ("   ", "", "sub-42", "sub-42"),
    ],
)
def test_display_name_fallbacks(name, email, external_id, expected):
    assert get_display_name(name, email, external_id) == expected


def test_default_group_name():
    assert default_group_name("Priya") == "Priya's Menu"
