"""007: create electric_bills table

Revision ID: 007
Revises: 006
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE electric_bills (
            billing_month   VARCHAR(7)      PRIMARY KEY,
            floor_costs     JSONB           NOT NULL DEFAULT '{}'::jsonb,
            bulk_expenses   JSONB           NOT NULL DEFAULT '[]'::jsonb,
            generated_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            last_updated    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_electric_bills_month CHECK (billing_month ~ '^\\d{4}-(0[1-9]|1[0-2])$')
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS electric_bills CASCADE;")
