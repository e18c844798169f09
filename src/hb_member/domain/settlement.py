"""SettlementCalculator — refund or amount owed when a member leaves.

refund = total_agreed_deposit - outstanding_balance. Pure functions; the
deactivation write lives in MemberService.
"""

from datetime import date

from src.hb_common.enums import SettlementStatus
from src.hb_member.domain.models import Member, Settlement


def settlement_status(refund_amount: int) -> SettlementStatus:
    if refund_amount > 0:
        return SettlementStatus.REFUND_DUE
    if refund_amount < 0:
        return SettlementStatus.PAYMENT_DUE
    return SettlementStatus.SETTLED


def compute_settlement(member: Member, leave_date: date) -> Settlement:
    refund = member.total_agreed_deposit - member.outstanding_balance
    return Settlement(
        member_id=member.id,
        member_name=member.name,
        total_agreed_deposit=member.total_agreed_deposit,
        outstanding_balance=member.outstanding_balance,
        refund_amount=refund,
        status=settlement_status(refund).value,
        leave_date=leave_date,
    )
