"""Domain models for hb_settings — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from src.hb_common.datetime_utils import next_billing_month


@dataclass(frozen=True)
class ActiveMemberCounts:
    """Denormalized head-counts of active members. Decrements clamp at 0."""

    total: int = 0
    by_floor: dict[str, int] = field(default_factory=dict)
    wifi_opted_in: int = 0

    def with_member_added(self, floor: str, opted_for_wifi: bool) -> "ActiveMemberCounts":
        by_floor = dict(self.by_floor)
        by_floor[floor] = by_floor.get(floor, 0) + 1
        return ActiveMemberCounts(
            total=self.total + 1,
            by_floor=by_floor,
            wifi_opted_in=self.wifi_opted_in + (1 if opted_for_wifi else 0),
        )

    def with_member_removed(self, floor: str, opted_for_wifi: bool) -> "ActiveMemberCounts":
        by_floor = dict(self.by_floor)
        by_floor[floor] = max(0, by_floor.get(floor, 0) - 1)
        return ActiveMemberCounts(
            total=max(0, self.total - 1),
            by_floor=by_floor,
            wifi_opted_in=max(0, self.wifi_opted_in - 1) if opted_for_wifi else self.wifi_opted_in,
        )

    def with_member_moved(
        self,
        old_floor: str,
        old_wifi: bool,
        new_floor: str,
        new_wifi: bool,
    ) -> "ActiveMemberCounts":
        return self.with_member_removed(old_floor, old_wifi).with_member_added(new_floor, new_wifi)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "by_floor": dict(self.by_floor),
            "wifi_opted_in": self.wifi_opted_in,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "ActiveMemberCounts":
        if not data:
            return cls()
        return cls(
            total=int(data.get("total", 0)),  # type: ignore[arg-type]
            by_floor={str(k): int(v) for k, v in dict(data.get("by_floor") or {}).items()},  # type: ignore[call-overload]
            wifi_opted_in=int(data.get("wifi_opted_in", 0)),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class GlobalSettings:
    """The singleton configuration record.

    ``version`` increments on every write; writers pass the version they read
    and lose on mismatch.
    """

    bed_rents: dict[str, dict[str, int]]    # floor -> bed type -> paise
    default_security_deposit: int           # paise
    wifi_monthly_charge: int                # paise
    current_billing_month: str | None
    next_billing_month: str | None
    active_member_counts: ActiveMemberCounts
    version: int
    upi_vpa: str | None = None
    payee_name: str | None = None
    updated_at: datetime | None = None

    def rent_for(self, floor: str, bed_type: str) -> int | None:
        return self.bed_rents.get(floor, {}).get(bed_type)

    def with_counts(self, counts: ActiveMemberCounts) -> "GlobalSettings":
        return replace(self, active_member_counts=counts)

    def needs_rollover_to(self, billing_month: str) -> bool:
        """True when ``billing_month`` is newer than the current billing period."""
        return self.current_billing_month is None or billing_month > self.current_billing_month

    def rolled_over_to(self, billing_month: str) -> "GlobalSettings":
        return replace(
            self,
            current_billing_month=billing_month,
            next_billing_month=next_billing_month(billing_month),
        )
