"""008: seed the global_settings row

Revision ID: 008
Revises: 007
Create Date: 2026-09-28
"""

from typing import Sequence, Union

from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Amounts in paise
    op.execute("""
        INSERT INTO global_settings (
            id, bed_rents, default_security_deposit, wifi_monthly_charge, version
        ) VALUES (
            1,
            '{"2nd": {"Bed": 160000, "Room": 320000, "Special": 200000},
              "3rd": {"Bed": 150000, "Room": 300000, "Special": 190000}}'::jsonb,
            100000,
            30000,
            0
        )
        ON CONFLICT (id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DELETE FROM global_settings WHERE id = 1;")
