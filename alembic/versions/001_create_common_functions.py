"""001: create common trigger functions

Revision ID: 001
Revises:
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Charge components and the opening snapshot of a ledger entry never change after insert.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_freeze_ledger_charges()
        RETURNS TRIGGER AS $$
        BEGIN
            IF NEW.rent <> OLD.rent
               OR NEW.electricity <> OLD.electricity
               OR NEW.wifi <> OLD.wifi
               OR NEW.previous_outstanding <> OLD.previous_outstanding
               OR NEW.total_charges <> OLD.total_charges
               OR NEW.expenses <> OLD.expenses THEN
                RAISE EXCEPTION 'ledger entry %/% charges are immutable',
                    OLD.member_id, OLD.billing_month;
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_freeze_ledger_charges();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
