"""006: create ledger_entries table

Revision ID: 006
Revises: 005
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            member_id               UUID            NOT NULL REFERENCES members (id),
            billing_month           VARCHAR(7)      NOT NULL,
            rent                    BIGINT          NOT NULL,
            electricity             BIGINT          NOT NULL,
            wifi                    BIGINT          NOT NULL,
            previous_outstanding    BIGINT          NOT NULL,
            expenses                JSONB           NOT NULL DEFAULT '[]'::jsonb,
            total_charges           BIGINT          NOT NULL,
            amount_paid             BIGINT          NOT NULL DEFAULT 0,
            current_outstanding     BIGINT          NOT NULL,
            status                  VARCHAR(16)     NOT NULL DEFAULT 'DUE',
            note                    TEXT,
            pending_reconciliation  BOOLEAN         NOT NULL DEFAULT FALSE,
            generated_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            last_payment_at         TIMESTAMPTZ,
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (member_id, billing_month),
            CONSTRAINT ck_ledger_month CHECK (billing_month ~ '^\\d{4}-(0[1-9]|1[0-2])$'),
            CONSTRAINT ck_ledger_status CHECK (
                status IN ('DUE', 'PARTIALLY_PAID', 'PAID', 'OVERPAID')
            ),
            CONSTRAINT ck_ledger_amount_paid CHECK (amount_paid >= 0),
            CONSTRAINT ck_ledger_identity CHECK (
                current_outstanding = previous_outstanding + total_charges - amount_paid
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_month ON ledger_entries (billing_month);")
    op.execute("""
        CREATE INDEX idx_ledger_pending ON ledger_entries (member_id)
        WHERE pending_reconciliation = TRUE;
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_updated_at
            BEFORE UPDATE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_frozen_charges
            BEFORE UPDATE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_freeze_ledger_charges();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
