"""Contract origination and administrative transitions."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from installments.engine.amortization import compute_amortization_schedule, quantize, to_decimal
from installments.engine.dates import add_months
from installments.exceptions import ContractTermsError, InvalidEntityStateError
from installments.models.contract import InstallmentContract, InstallmentPayment
from installments.models.enums import TERMINAL_STATUSES, ContractStatus
from installments.models.plan import InstallmentPlan, PlanTerms

logger = logging.getLogger(__name__)


def snapshot_terms(plan: InstallmentPlan) -> PlanTerms:
    """Copy a plan's financial terms so later plan edits do not leak into contracts."""
    return PlanTerms(
        plan_id=plan.plan_id,
        number_of_installments=plan.number_of_installments,
        interest_rate=to_decimal(plan.interest_rate),
        down_payment_percent=to_decimal(plan.down_payment_percent),
        processing_fee=to_decimal(plan.processing_fee),
    )


def check_plan_terms(plan: InstallmentPlan, total_amount: Decimal, guarantor_id: str | None) -> None:
    """Raise ContractTermsError if the sale cannot be financed under ``plan``."""
    if not plan.is_active:
        raise ContractTermsError(f"Plan {plan.plan_id} is not active")
    if total_amount < plan.min_amount:
        raise ContractTermsError(
            f"Amount {total_amount} is below the minimum {plan.min_amount} of plan {plan.plan_id}"
        )
    if plan.max_amount is not None and total_amount > plan.max_amount:
        raise ContractTermsError(
            f"Amount {total_amount} exceeds the maximum {plan.max_amount} of plan {plan.plan_id}"
        )
    if plan.requires_guarantor and not guarantor_id:
        raise ContractTermsError(f"Plan {plan.plan_id} requires a guarantor")


def create_contract(
    contract_id: str,
    customer_id: str,
    plan: InstallmentPlan,
    total_amount: Decimal | int | str,
    contract_date: date,
    created_at: datetime,
    contract_number: str | None = None,
    guarantor_id: str | None = None,
    notes: str | None = None,
) -> InstallmentContract:
    """Create a draft contract with its full payment schedule.

    The down payment is ``total_amount * down_payment_percent / 100``; the
    remainder is amortized over the plan's installments, the first one due a
    month after ``contract_date``.

    Raises
    ------
    ContractTermsError
        The plan is inactive, the amount is outside its limits, or a
        required guarantor is missing.
    InvalidAmortizationInputError
        Nothing is left to finance after the down payment.
    """
    total = quantize(to_decimal(total_amount))
    check_plan_terms(plan, total, guarantor_id)
    terms = snapshot_terms(plan)

    down_payment = quantize(total * terms.down_payment_percent / 100)
    financed = total - down_payment
    schedule = compute_amortization_schedule(financed, terms.interest_rate, terms.number_of_installments)

    payments = [
        InstallmentPayment(
            payment_id=str(uuid.uuid4()),
            contract_id=contract_id,
            installment_number=line.installment_number,
            due_date=add_months(contract_date, line.installment_number),
            amount=line.amount,
            principal_amount=line.principal,
            interest_amount=line.interest,
        )
        for line in schedule.lines
    ]

    logger.debug(
        "Created contract %s: financed=%s payment=%s installments=%d",
        contract_id,
        financed,
        schedule.payment,
        len(payments),
    )

    return InstallmentContract(
        contract_id=contract_id,
        contract_number=contract_number or f"CT{contract_date:%Y%m%d}-{contract_id[:8].upper()}",
        customer_id=customer_id,
        plan_id=plan.plan_id,
        terms=terms,
        total_amount=total,
        down_payment=down_payment,
        financed_amount=financed,
        monthly_payment=schedule.payment,
        processing_fee=terms.processing_fee,
        status=ContractStatus.DRAFT,
        contract_date=contract_date,
        payments=payments,
        guarantor_id=guarantor_id,
        notes=notes,
        created_at=created_at,
        updated_at=created_at,
    )


def activate_contract(contract: InstallmentContract, now: datetime) -> InstallmentContract:
    """Move a draft contract to active."""
    if contract.status != ContractStatus.DRAFT:
        raise InvalidEntityStateError(
            f"Contract {contract.contract_id} is {contract.status.value}, only drafts can be activated"
        )
    return replace(contract, status=ContractStatus.ACTIVE, updated_at=now)


def cancel_contract(
    contract: InstallmentContract,
    now: datetime,
    reason: str | None = None,
) -> InstallmentContract:
    """Cancel a contract. Cancellation is final and never re-derived."""
    if contract.status in TERMINAL_STATUSES:
        raise InvalidEntityStateError(
            f"Contract {contract.contract_id} is already {contract.status.value}"
        )
    notes = contract.notes
    if reason:
        notes = f"{notes}\n{reason}" if notes else reason
    return replace(contract, status=ContractStatus.CANCELLED, notes=notes, updated_at=now)
