"""Pydantic schemas for hb_settings API."""

from pydantic import BaseModel, Field, field_validator

from src.hb_common.enums import BedType, Floor
from src.hb_common.money import paise_to_display
from src.hb_settings.domain.models import GlobalSettings

_FLOORS = {f.value for f in Floor}
_BED_TYPES = {b.value for b in BedType}


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class UpdateSettingsRequest(BaseModel):
    """Partial update. Billing months and active counts are system-managed and not accepted."""

    expected_version: int = Field(..., ge=0, description="Version the client last read")
    bed_rents: dict[str, dict[str, int]] | None = None
    default_security_deposit: int | None = Field(None, ge=0)
    wifi_monthly_charge: int | None = Field(None, ge=0)
    upi_vpa: str | None = Field(None, max_length=100)
    payee_name: str | None = Field(None, max_length=100)

    @field_validator("bed_rents")
    @classmethod
    def known_floors_and_beds(
        cls, v: dict[str, dict[str, int]] | None
    ) -> dict[str, dict[str, int]] | None:
        if v is None:
            return v
        for floor, rents in v.items():
            if floor not in _FLOORS:
                raise ValueError(f"Unknown floor: {floor}")
            for bed_type, amount in rents.items():
                if bed_type not in _BED_TYPES:
                    raise ValueError(f"Unknown bed type: {bed_type}")
                if amount < 0:
                    raise ValueError(f"Rent for {floor}/{bed_type} must be >= 0")
        return v


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ActiveMemberCountsResponse(BaseModel):
    total: int
    by_floor: dict[str, int]
    wifi_opted_in: int


class SettingsResponse(BaseModel):
    bed_rents: dict[str, dict[str, int]]
    default_security_deposit: int
    wifi_monthly_charge: int
    wifi_monthly_charge_display: str
    current_billing_month: str | None
    next_billing_month: str | None
    active_member_counts: ActiveMemberCountsResponse
    upi_vpa: str | None
    payee_name: str | None
    version: int

    @classmethod
    def from_domain(cls, s: GlobalSettings) -> "SettingsResponse":
        counts = s.active_member_counts
        return cls(
            bed_rents=s.bed_rents,
            default_security_deposit=s.default_security_deposit,
            wifi_monthly_charge=s.wifi_monthly_charge,
            wifi_monthly_charge_display=paise_to_display(s.wifi_monthly_charge),
            current_billing_month=s.current_billing_month,
            next_billing_month=s.next_billing_month,
            active_member_counts=ActiveMemberCountsResponse(
                total=counts.total,
                by_floor=dict(counts.by_floor),
                wifi_opted_in=counts.wifi_opted_in,
            ),
            upi_vpa=s.upi_vpa,
            payee_name=s.payee_name,
            version=s.version,
        )
