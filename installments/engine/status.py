"""Contract status derivation from payment rows and the current date."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal

from installments.config import DefaultPolicy, LateFeePolicy
from installments.engine.dates import as_date
from installments.engine.late_fee import compute_late_fee
from installments.exceptions import MalformedPaymentScheduleError
from installments.models.contract import InstallmentContract, InstallmentPayment
from installments.models.enums import TERMINAL_STATUSES, ContractStatus, PaymentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractStatusReport:
    """Snapshot of a contract's standing at a given moment."""

    status: ContractStatus
    paid_installments: int
    overdue_payments: tuple[InstallmentPayment, ...]
    remaining_balance: Decimal
    total_overdue: Decimal
    next_due_payment: InstallmentPayment | None

    @property
    def overdue_count(self) -> int:
        return len(self.overdue_payments)


def payment_status(payment: InstallmentPayment, now: date | datetime) -> PaymentStatus:
    """Current status of a payment: paid, overdue (due date passed) or pending."""
    if payment.is_paid:
        return PaymentStatus.PAID
    if payment.due_date < as_date(now):
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def validate_schedule(payments: list[InstallmentPayment]) -> None:
    """Check that payments are numbered 1..n without gaps or duplicates."""
    if not payments:
        raise MalformedPaymentScheduleError("Payment schedule is empty")

    numbers = sorted(p.installment_number for p in payments)
    expected = list(range(1, len(payments) + 1))
    if numbers != expected:
        missing = sorted(set(expected) - set(numbers))
        raise MalformedPaymentScheduleError(
            f"Installment numbers must run 1..{len(payments)} without gaps, "
            f"got {numbers} (missing {missing})"
        )


def derive_contract_status(
    contract: InstallmentContract,
    now: date | datetime,
    default_policy: DefaultPolicy | None = None,
    late_fee_policy: LateFeePolicy | None = None,
) -> ContractStatusReport:
    """Derive a contract's status and balances as of ``now``.

    Parameters
    ----------
    contract : InstallmentContract
        Contract with its full payment schedule.
    now : date | datetime
        Reference moment; payments due strictly before its date are overdue.
    default_policy : DefaultPolicy | None
        Thresholds that turn overdue payments into a default.
    late_fee_policy : LateFeePolicy | None
        Policy used for the late fees included in the remaining balance.

    Returns
    -------
    ContractStatusReport
        Derived status, paid count, overdue payments (by due date),
        remaining balance including current late fees.

    Raises
    ------
    MalformedPaymentScheduleError
        The schedule is empty or its numbering has gaps.
    """
    validate_schedule(contract.payments)
    default_policy = default_policy or DefaultPolicy()
    payments = sorted(contract.payments, key=lambda p: p.installment_number)

    paid = [p for p in payments if p.is_paid]
    overdue = tuple(
        sorted(
            (p for p in payments if payment_status(p, now) == PaymentStatus.OVERDUE),
            key=lambda p: (p.due_date, p.installment_number),
        )
    )
    unpaid = [p for p in payments if not p.is_paid]

    remaining = sum(
        (p.amount + compute_late_fee(p, now, late_fee_policy) for p in unpaid),
        Decimal("0.00"),
    )
    total_overdue = sum((p.amount for p in overdue), Decimal("0.00"))
    next_due = next(
        (p for p in unpaid if payment_status(p, now) == PaymentStatus.PENDING),
        None,
    )

    status = _classify(contract, len(paid) == len(payments), overdue, total_overdue, default_policy)

    return ContractStatusReport(
        status=status,
        paid_installments=len(paid),
        overdue_payments=overdue,
        remaining_balance=remaining,
        total_overdue=total_overdue,
        next_due_payment=next_due,
    )


def _classify(
    contract: InstallmentContract,
    all_paid: bool,
    overdue: tuple[InstallmentPayment, ...],
    total_overdue: Decimal,
    policy: DefaultPolicy,
) -> ContractStatus:
    if contract.status in (ContractStatus.CANCELLED, ContractStatus.DRAFT):
        return contract.status
    if all_paid:
        return ContractStatus.COMPLETED

    if is_in_default(contract, overdue, total_overdue, policy):
        return ContractStatus.DEFAULTED
    if contract.status == ContractStatus.DEFAULTED and not policy.allow_recovery:
        return ContractStatus.DEFAULTED
    return ContractStatus.ACTIVE


def is_in_default(
    contract: InstallmentContract,
    overdue: tuple[InstallmentPayment, ...],
    total_overdue: Decimal,
    policy: DefaultPolicy,
) -> bool:
    """Whether overdue payments exceed either default threshold."""
    if len(overdue) > policy.max_overdue_installments:
        return True
    if policy.max_overdue_ratio is not None:
        return total_overdue > contract.financed_amount * policy.max_overdue_ratio
    return False


def refresh_contract_status(
    contract: InstallmentContract,
    now: date | datetime,
    default_policy: DefaultPolicy | None = None,
    late_fee_policy: LateFeePolicy | None = None,
) -> InstallmentContract:
    """Return a copy of the contract carrying its derived status.

    Completed and cancelled contracts are returned unchanged.
    """
    if contract.status in TERMINAL_STATUSES:
        return contract

    report = derive_contract_status(contract, now, default_policy, late_fee_policy)
    if report.status == contract.status:
        return contract

    logger.debug(
        "Contract %s: %s -> %s", contract.contract_id, contract.status.value, report.status.value
    )
    updated_at = now if isinstance(now, datetime) else contract.updated_at
    return replace(contract, status=report.status, updated_at=updated_at)
