"""004: create global_settings singleton

Revision ID: 004
Revises: 003
Create Date: 2026-09-28
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE global_settings (
            id                          SMALLINT        PRIMARY KEY DEFAULT 1,
            bed_rents                   JSONB           NOT NULL DEFAULT '{}'::jsonb,
            default_security_deposit    BIGINT          NOT NULL DEFAULT 0,
            wifi_monthly_charge         BIGINT          NOT NULL DEFAULT 0,
            current_billing_month       VARCHAR(7),
            next_billing_month          VARCHAR(7),
            active_member_counts        JSONB           NOT NULL DEFAULT '{"total": 0, "by_floor": {}, "wifi_opted_in": 0}'::jsonb,
            upi_vpa                     VARCHAR(100),
            payee_name                  VARCHAR(100),
            version                     BIGINT          NOT NULL DEFAULT 0,
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_global_settings_singleton CHECK (id = 1),
            CONSTRAINT ck_global_settings_amounts CHECK (
                default_security_deposit >= 0 AND wifi_monthly_charge >= 0
            ),
            CONSTRAINT ck_global_settings_month CHECK (
                current_billing_month IS NULL OR current_billing_month ~ '^\\d{4}-(0[1-9]|1[0-2])$'
            )
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS global_settings CASCADE;")
