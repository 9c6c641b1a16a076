"""Recording installment payments against a contract."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from installments.config import DefaultPolicy, LateFeePolicy
from installments.engine.amortization import quantize, to_decimal
from installments.engine.dates import as_date
from installments.engine.late_fee import compute_late_fee
from installments.engine.status import refresh_contract_status, validate_schedule
from installments.exceptions import (
    InstallmentNotFoundError,
    InvalidEntityStateError,
    PaymentAlreadyRecordedError,
    UnderpaymentError,
)
from installments.models.contract import InstallmentContract, InstallmentPayment
from installments.models.enums import ContractStatus, PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)


def amount_due(
    payment: InstallmentPayment,
    now: date | datetime,
    late_fee_policy: LateFeePolicy | None = None,
) -> Decimal:
    """Installment amount plus the late fee owed as of ``now``."""
    return payment.amount + compute_late_fee(payment, now, late_fee_policy)


def record_payment(
    contract: InstallmentContract,
    installment_number: int,
    amount_collected: Decimal | int | str | None,
    now: date | datetime,
    late_fee_policy: LateFeePolicy | None = None,
    default_policy: DefaultPolicy | None = None,
    payment_method: PaymentMethod = PaymentMethod.CASH,
) -> InstallmentContract:
    """Mark one installment as paid and return the updated contract.

    The input contract is left untouched. The late fee due at ``now`` is
    recorded on the payment together with the collected amount, and the
    contract status is re-derived afterwards.

    Parameters
    ----------
    contract : InstallmentContract
        Active or defaulted contract.
    installment_number : int
        Number of the installment being settled.
    amount_collected : Decimal | int | str | None
        Cash received; ``None`` means exactly the amount due.
    now : date | datetime
        Moment of collection.

    Raises
    ------
    InvalidEntityStateError
        The contract is a draft or has been cancelled.
    InstallmentNotFoundError
        The contract has no installment with that number.
    PaymentAlreadyRecordedError
        The installment is already paid.
    UnderpaymentError
        ``amount_collected`` is less than the amount due.
    """
    if contract.status in (ContractStatus.DRAFT, ContractStatus.CANCELLED):
        raise InvalidEntityStateError(
            f"Cannot record payments on {contract.status.value} contract {contract.contract_id}"
        )
    validate_schedule(contract.payments)

    payment = contract.get_payment(installment_number)
    if payment is None:
        raise InstallmentNotFoundError(
            f"Contract {contract.contract_id} has no installment {installment_number}"
        )
    if payment.is_paid:
        raise PaymentAlreadyRecordedError(
            f"Installment {installment_number} of contract {contract.contract_id} "
            f"was already paid on {payment.paid_date}"
        )

    fee = compute_late_fee(payment, now, late_fee_policy)
    due = payment.amount + fee
    collected = due if amount_collected is None else quantize(to_decimal(amount_collected))
    if collected < due:
        raise UnderpaymentError(
            f"Installment {installment_number} of contract {contract.contract_id} "
            f"requires {due} (late fee {fee}), collected {collected}"
        )

    paid = replace(
        payment,
        status=PaymentStatus.PAID,
        paid_date=as_date(now),
        paid_amount=collected,
        late_fee=fee,
        payment_method=payment_method,
    )
    payments = [paid if p.installment_number == installment_number else p for p in contract.payments]
    updated_at = now if isinstance(now, datetime) else contract.updated_at

    logger.debug(
        "Recorded installment %d of contract %s: collected=%s fee=%s",
        installment_number,
        contract.contract_id,
        collected,
        fee,
    )

    updated = replace(contract, payments=payments, updated_at=updated_at)
    return refresh_contract_status(updated, now, default_policy, late_fee_policy)
