"""Create users, contacts and transactions tables

Revision ID: 001
Revises: None
Create Date: 2024-05-02 00:00:00.000000+00:00

What:  Initial schema: users with a credit balance, their contacts, and the
       transactions debiting that credit.
How:   Portable column types only, so the same revision runs on PostgreSQL
       and on SQLite.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False, comment="Opaque identifier (UUID4 text)"),
        sa.Column("username", sa.String(256), nullable=False, comment="Login name; unique regardless of case"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=True,
            comment="bcrypt hash; NULL means the user cannot log in yet",
        ),
        sa.Column(
            "credit",
            sa.Float(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Spendable balance, reduced by each transaction amount",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Case-insensitive uniqueness: "Alice" and "alice" are the same login
    op.create_index(
        "uq_users_username_lower",
        "users",
        [sa.text("lower(username)")],
        unique=True,
    )

    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nickname", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contacts_user_id", "contacts", ["user_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("contact_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        # History outlives the contact
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_transactions_user_contact",
        "transactions",
        ["user_id", "contact_id"],
    )


def downgrade() -> None:
    """Drop all tables, children first. All data is lost."""
    op.drop_index("idx_transactions_user_contact", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_contacts_user_id", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("uq_users_username_lower", table_name="users")
    op.drop_table("users")
