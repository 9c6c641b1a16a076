"""Late fee computation for overdue installments."""

from datetime import date, datetime
from decimal import Decimal

from installments.config import LateFeePolicy
from installments.engine.amortization import quantize
from installments.engine.dates import days_between
from installments.models.contract import InstallmentPayment

ZERO = Decimal("0.00")


def days_late(payment: InstallmentPayment, now: date | datetime) -> int:
    """Days elapsed since the due date, zero on or before it."""
    return max(0, days_between(now, payment.due_date))


def compute_late_fee(
    payment: InstallmentPayment,
    now: date | datetime,
    policy: LateFeePolicy | None = None,
) -> Decimal:
    """Compute the late fee owed on a payment as of ``now``.

    Unpaid payments are charged ``amount * daily_rate`` per day late, capped
    at ``amount * max_fee_ratio``. The result is recomputed on every call and
    never stored on the payment. For a paid payment the fee recorded at
    collection is returned instead.
    """
    if payment.is_paid:
        return payment.late_fee if payment.late_fee is not None else ZERO

    policy = policy or LateFeePolicy()
    late = days_late(payment, now)
    if late == 0:
        return ZERO

    fee = payment.amount * policy.daily_rate * late
    cap = payment.amount * policy.max_fee_ratio
    return quantize(min(fee, cap))
