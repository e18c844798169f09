"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Floor(str, Enum):
    SECOND = "2nd"
    THIRD = "3rd"


class BedType(str, Enum):
    BED = "Bed"
    ROOM = "Room"
    SPECIAL = "Special"


class PaymentStatus(str, Enum):
    DUE = "DUE"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERPAID = "OVERPAID"


class SettlementStatus(str, Enum):
    """Human-readable labels shown on the move-out screen."""
    REFUND_DUE = "Refund Due"
    PAYMENT_DUE = "Payment Due"
    SETTLED = "Settled"


class AdminRole(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
