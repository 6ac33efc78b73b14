"""groups: groups, group_members, users.active_group_id, menu_items.group_id

Revision ID: 0002_groups
Revises: 0001_initial
Create Date: 2026-09-15 11:42:37.000000

Существующие пользователи остаются без групп: группа по умолчанию
заводится при следующем входе. Старые блюда (group_id IS NULL) видны автору,
пока у него нет активной группы.
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002_groups"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


group_role = sa.Enum("owner", "member", name="group_role")


def _col_names(bind, table: str):
    insp = sa.inspect(bind)
    return {c["name"] for c in insp.get_columns(table)}


def _table_names(bind):
    return set(sa.inspect(bind).get_table_names())


def upgrade() -> None:
    bind = op.get_bind()
    tables = _table_names(bind)

    if "groups" not in tables:
        op.create_table(
            "groups",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column(
                "invite_code",
                sa.String(length=32),
                nullable=False,
                comment="Код приглашения; перевыпускается владельцем, старый перестаёт работать",
            ),
            sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("ix_groups_id", "groups", ["id"])
        op.create_index("ix_groups_name", "groups", ["name"])
        op.create_index("ix_groups_invite_code", "groups", ["invite_code"], unique=True)

    if "group_members" not in tables:
        op.create_table(
            "group_members",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("role", group_role, nullable=False, server_default=sa.text("'member'")),
            sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
        )
        op.create_index("ix_group_members_id", "group_members", ["id"])
        op.create_index("ix_group_members_group_id", "group_members", ["group_id"])
        op.create_index("ix_group_members_user_id", "group_members", ["user_id"])
        op.create_index("ix_group_members_group_role", "group_members", ["group_id", "role"])

    # Активная группа: без FK, согласованность держит сервис членства
    if "active_group_id" not in _col_names(bind, "users"):
        op.add_column(
            "users",
            sa.Column("active_group_id", sa.Integer(), nullable=True, comment="Текущая активная группа (без FK)"),
        )
        op.create_index("ix_users_active_group_id", "users", ["active_group_id"])

    if "group_id" not in _col_names(bind, "menu_items"):
        with op.batch_alter_table("menu_items") as batch:
            batch.add_column(sa.Column("group_id", sa.Integer(), nullable=True))
            batch.create_foreign_key(
                "fk_menu_items_group_id", "groups", ["group_id"], ["id"], ondelete="CASCADE"
            )
        op.create_index("ix_menu_items_group_category", "menu_items", ["group_id", "category"])


def downgrade() -> None:
    bind = op.get_bind()

    if "group_id" in _col_names(bind, "menu_items"):
        op.drop_index("ix_menu_items_group_category", table_name="menu_items")
        with op.batch_alter_table("menu_items") as batch:
            batch.drop_constraint("fk_menu_items_group_id", type_="foreignkey")
            batch.drop_column("group_id")

    if "active_group_id" in _col_names(bind, "users"):
        op.drop_index("ix_users_active_group_id", table_name="users")
        op.drop_column("users", "active_group_id")

    tables = _table_names(bind)
    if "group_members" in tables:
        op.drop_table("group_members")
    if "groups" in tables:
        op.drop_table("groups")
    group_role.drop(bind, checkfirst=True)
