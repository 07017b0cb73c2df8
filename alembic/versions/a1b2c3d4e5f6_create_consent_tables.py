"""Create person, cookie category, cookie and consent decision tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

user_type = sa.Enum("STANDARD", "GUEST", "AUTOMATED", name="usertype")
consent_status = sa.Enum("AGREED", "DECLINED", name="consentstatus")


def upgrade() -> None:
    # Accounts are owned by the identity provider; mirrored here for linkage
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("user_type", user_type, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_username", "users", ["username"], unique=False)

    op.create_table(
        "persons",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=True),
        sa.Column("browser_id", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_persons_id", "persons", ["id"], unique=False)
    op.create_index("ix_persons_account_id", "persons", ["account_id"], unique=False)
    op.create_index("ix_persons_browser_id", "persons", ["browser_id"], unique=False)

    op.create_table(
        "cookie_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_mandatory", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("default_value", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("additional_info", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cookie_categories_id", "cookie_categories", ["id"], unique=False)

    op.create_table(
        "cookies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["cookie_categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cookies_id", "cookies", ["id"], unique=False)
    op.create_index("ix_cookies_category_id", "cookies", ["category_id"], unique=False)

    op.create_table(
        "consent_decisions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("status", consent_status, nullable=True),
        sa.Column("capture_source", sa.String(length=100), nullable=True),
        sa.Column("capture_channel", sa.String(length=50), nullable=True),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["cookie_categories.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_consent_decisions_id", "consent_decisions", ["id"], unique=False)
    op.create_index("ix_consent_decisions_category_id", "consent_decisions", ["category_id"], unique=False)
    op.create_index("ix_consent_decisions_person_id", "consent_decisions", ["person_id"], unique=False)
    op.create_index("idx_consent_person_category", "consent_decisions", ["person_id", "category_id"], unique=False)
    op.create_index("idx_consent_person_status", "consent_decisions", ["person_id", "status"], unique=False)


def downgrade() -> None:
    op.drop_table("consent_decisions")
    op.drop_table("cookies")
    op.drop_table("cookie_categories")
    op.drop_table("persons")
    op.drop_table("users")
    consent_status.drop(op.get_bind(), checkfirst=True)
    user_type.drop(op.get_bind(), checkfirst=True)
