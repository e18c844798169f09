"""003: create admins allowlist

Revision ID: 003
Revises: 002
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE admins (
            user_id     UUID            PRIMARY KEY REFERENCES users (id) ON DELETE CASCADE,
            email       VARCHAR(255)    NOT NULL,
            role        VARCHAR(16)     NOT NULL DEFAULT 'secondary',
            added_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            added_by    UUID,
            CONSTRAINT ck_admins_role CHECK (role IN ('primary', 'secondary'))
        );
    """)
    # At most one primary admin
    op.execute("""
        CREATE UNIQUE INDEX uq_admins_single_primary ON admins (role)
        WHERE role = 'primary';
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS admins CASCADE;")
