"""Integer arithmetic utilities for paise-based billing.

All rents, charges, payments and balances use int (paise, 1/100 rupee).
No float, no Decimal.
"""


def paise_to_display(paise: int) -> str:
    """Convert paise to display string: 265000 -> '₹2,650.00', -35000 -> '-₹350.00'."""
    if paise < 0:
        abs_paise = -paise
        return f"-₹{abs_paise // 100:,}.{abs_paise % 100:02d}"
    return f"₹{paise // 100:,}.{paise % 100:02d}"


def divide_round_half_up(amount: int, parts: int) -> int:
    """Split ``amount`` into ``parts`` shares, rounding half away from zero to the paisa.

    Integer form of round(amount / parts): (2*|a| + p) // (2*p), sign restored.
    """
    if parts <= 0:
        raise ValueError(f"parts must be positive, got {parts}")
    magnitude = (2 * abs(amount) + parts) // (2 * parts)
    return magnitude if amount >= 0 else -magnitude
