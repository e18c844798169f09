"""005: create members table

Revision ID: 005
Revises: 004
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE members (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name                    VARCHAR(100)    NOT NULL,
            phone                   VARCHAR(16)     NOT NULL,
            floor                   VARCHAR(8)      NOT NULL,
            bed_type                VARCHAR(16)     NOT NULL,
            move_in_date            DATE            NOT NULL,
            security_deposit        BIGINT          NOT NULL,
            rent_at_joining         BIGINT          NOT NULL,
            advance_deposit         BIGINT          NOT NULL DEFAULT 0,
            current_rent            BIGINT          NOT NULL,
            total_agreed_deposit    BIGINT          NOT NULL,
            outstanding_balance     BIGINT          NOT NULL DEFAULT 0,
            is_active               BOOLEAN         NOT NULL DEFAULT TRUE,
            opted_for_wifi          BOOLEAN         NOT NULL DEFAULT FALSE,
            version                 BIGINT          NOT NULL DEFAULT 0,
            user_id                 UUID            REFERENCES users (id) ON DELETE SET NULL,
            leave_date              DATE,
            ttl_expiry              DATE,
            note                    TEXT,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_members_phone UNIQUE (phone),
            CONSTRAINT ck_members_floor CHECK (floor IN ('2nd', '3rd')),
            CONSTRAINT ck_members_bed_type CHECK (bed_type IN ('Bed', 'Room', 'Special')),
            CONSTRAINT ck_members_amounts CHECK (
                security_deposit >= 0 AND rent_at_joining >= 0
                AND advance_deposit >= 0 AND current_rent >= 0
            ),
            CONSTRAINT ck_members_leave CHECK (is_active OR leave_date IS NOT NULL)
        );
    """)
    op.execute("CREATE INDEX idx_members_active_floor ON members (is_active, floor);")
    op.execute("CREATE INDEX idx_members_user_id ON members (user_id) WHERE user_id IS NOT NULL;")
    op.execute("""
        CREATE TRIGGER trg_members_updated_at
            BEFORE UPDATE ON members
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS members CASCADE;")
