"""SettingsRepository — concrete implementation of SettingsRepositoryProtocol.

The configuration lives in the single-row ``global_settings`` table (id = 1).
Writes are compare-and-swap on ``version``: 0 rows returned means another
writer committed first.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.hb_common.jsonb import dump_json, load_json
from src.hb_settings.domain.models import ActiveMemberCounts, GlobalSettings

_SETTINGS_COLUMNS = """
    bed_rents, default_security_deposit, wifi_monthly_charge,
    current_billing_month, next_billing_month, active_member_counts,
    upi_vpa, payee_name, version, updated_at
"""

_GET_SETTINGS_SQL = text(f"""
    SELECT {_SETTINGS_COLUMNS}
    FROM global_settings
    WHERE id = 1
""")

_CAS_SETTINGS_SQL = text(f"""
    UPDATE global_settings
    SET bed_rents                = CAST(:bed_rents AS JSONB),
        default_security_deposit = :default_security_deposit,
        wifi_monthly_charge      = :wifi_monthly_charge,
        current_billing_month    = :current_billing_month,
        next_billing_month       = :next_billing_month,
        active_member_counts     = CAST(:active_member_counts AS JSONB),
        upi_vpa                  = :upi_vpa,
        payee_name               = :payee_name,
        version = version + 1,
        updated_at = NOW()
    WHERE id = 1 AND version = :expected_version
    RETURNING {_SETTINGS_COLUMNS}
""")


def _row_to_settings(row: object) -> GlobalSettings:
    bed_rents = load_json(row.bed_rents) or {}  # type: ignore[attr-defined]
    return GlobalSettings(
        bed_rents={
            floor: {bed: int(amount) for bed, amount in rents.items()}
            for floor, rents in bed_rents.items()
        },
        default_security_deposit=row.default_security_deposit,  # type: ignore[attr-defined]
        wifi_monthly_charge=row.wifi_monthly_charge,  # type: ignore[attr-defined]
        current_billing_month=row.current_billing_month,  # type: ignore[attr-defined]
        next_billing_month=row.next_billing_month,  # type: ignore[attr-defined]
        active_member_counts=ActiveMemberCounts.from_dict(
            load_json(row.active_member_counts)  # type: ignore[attr-defined]
        ),
        upi_vpa=row.upi_vpa,  # type: ignore[attr-defined]
        payee_name=row.payee_name,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class SettingsRepository:
    async def get_settings(self, db: AsyncSession) -> GlobalSettings | None:
        row = (await db.execute(_GET_SETTINGS_SQL)).fetchone()
        return _row_to_settings(row) if row else None

    async def save_settings(
        self, db: AsyncSession, settings: GlobalSettings, expected_version: int
    ) -> GlobalSettings | None:
        result = await db.execute(
            _CAS_SETTINGS_SQL,
            {
                "bed_rents": dump_json(settings.bed_rents),
                "default_security_deposit": settings.default_security_deposit,
                "wifi_monthly_charge": settings.wifi_monthly_charge,
                "current_billing_month": settings.current_billing_month,
                "next_billing_month": settings.next_billing_month,
                "active_member_counts": dump_json(settings.active_member_counts.to_dict()),
                "upi_vpa": settings.upi_vpa,
                "payee_name": settings.payee_name,
                "expected_version": expected_version,
            },
        )
        row = result.fetchone()
        return _row_to_settings(row) if row else None
