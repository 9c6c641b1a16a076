"""Application service tying the engine to a store and an event sink."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Protocol

from installments.config import InstallmentsConfig
from installments.engine import contracts as contract_ops
from installments.engine.eligibility import EligibilityResult, check_eligibility
from installments.engine.payments import record_payment
from installments.engine.portfolio import PortfolioStatistics, compute_portfolio_statistics
from installments.engine.status import ContractStatusReport, derive_contract_status, refresh_contract_status
from installments.exceptions import (
    ContractTermsError,
    EntityNotFoundError,
    InstallmentError,
    MalformedPaymentScheduleError,
    PaymentAlreadyRecordedError,
)
from installments.logging import contract_logger
from installments.models import ContractStatus, Event, InstallmentContract, PaymentMethod
from installments.models.enums import TERMINAL_STATUSES
from installments.store import InstallmentDataStore

logger = logging.getLogger(__name__)

EVENT_SOURCE = "installments.service"


class EventPublisher(Protocol):
    """Anything that can deliver a record to a topic (see ``installments.sinks``)."""

    def send(self, topic: str, record: Any, key: str | None = None) -> None: ...


class OutcomeKind(str, Enum):
    APPLIED = "APPLIED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_RECORDED = "ALREADY_RECORDED"
    REJECTED = "REJECTED"
    MALFORMED_SCHEDULE = "MALFORMED_SCHEDULE"


@dataclass(frozen=True)
class PaymentInstruction:
    """One payment to apply in a batch."""

    contract_id: str
    installment_number: int
    amount_collected: Decimal | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one instruction of a batch."""

    instruction: PaymentInstruction
    outcome: OutcomeKind
    error: InstallmentError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == OutcomeKind.APPLIED


def classify_error(error: InstallmentError) -> OutcomeKind:
    """Map an engine error to a batch outcome."""
    if isinstance(error, EntityNotFoundError):
        return OutcomeKind.NOT_FOUND
    if isinstance(error, PaymentAlreadyRecordedError):
        return OutcomeKind.ALREADY_RECORDED
    if isinstance(error, MalformedPaymentScheduleError):
        return OutcomeKind.MALFORMED_SCHEDULE
    return OutcomeKind.REJECTED


class InstallmentService:
    """Load, compute, save and publish for installment contracts.

    Each method is one read-modify-write on the store: the engine works on
    copies, so the stored contract is only replaced once every check passed.
    """

    def __init__(
        self,
        store: InstallmentDataStore,
        config: InstallmentsConfig | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.store = store
        self.config = config or InstallmentsConfig()
        self.publisher = publisher

    def check_eligibility(
        self,
        customer_id: str,
        amount: Decimal | int | str,
        plan_id: str | None = None,
    ) -> EligibilityResult:
        """Check a customer against their current commitments."""
        customer = self.store.load_customer(customer_id)
        plan = self.store.load_plan(plan_id) if plan_id else None
        existing = sum(
            (
                c.monthly_payment
                for c in self.store.get_customer_contracts(customer_id)
                if c.status in (ContractStatus.ACTIVE, ContractStatus.DEFAULTED)
            ),
            Decimal("0"),
        )
        return check_eligibility(customer, amount, plan, existing, self.config.eligibility)

    def open_contract(
        self,
        customer_id: str,
        plan_id: str,
        total_amount: Decimal | int | str,
        now: datetime,
        contract_id: str | None = None,
        guarantor_id: str | None = None,
        notes: str | None = None,
        enforce_eligibility: bool = True,
    ) -> InstallmentContract:
        """Originate and activate a contract for a sale.

        Raises
        ------
        ContractTermsError
            The plan's terms or, when enforced, the eligibility check reject
            the sale.
        InvalidEntityStateError
            ``contract_id`` is already taken by a stored contract.
        """
        plan = self.store.load_plan(plan_id)
        self.store.load_customer(customer_id)

        if enforce_eligibility:
            result = self.check_eligibility(customer_id, total_amount, plan_id)
            if not result.eligible:
                raise ContractTermsError(
                    f"Customer {customer_id} is not eligible: {'; '.join(result.reasons)}"
                )
            if result.requires_guarantor and not guarantor_id:
                raise ContractTermsError(f"Customer {customer_id} requires a guarantor")

        contract = contract_ops.create_contract(
            contract_id=contract_id or str(uuid.uuid4()),
            customer_id=customer_id,
            plan=plan,
            total_amount=total_amount,
            contract_date=now.date(),
            created_at=now,
            guarantor_id=guarantor_id,
            notes=notes,
        )
        contract = contract_ops.activate_contract(contract, now)
        self.store.add_contract(contract)

        logger.info(
            "Opened contract %s for customer %s: financed=%s monthly=%s x %d",
            contract.contract_number,
            customer_id,
            contract.financed_amount,
            contract.monthly_payment,
            len(contract.payments),
        )
        self._publish(
            "installment.contract_opened",
            contract,
            now,
            {
                "contract_number": contract.contract_number,
                "customer_id": customer_id,
                "plan_id": plan_id,
                "financed_amount": contract.financed_amount,
                "monthly_payment": contract.monthly_payment,
                "number_of_installments": len(contract.payments),
            },
        )
        return contract

    def record_payment(
        self,
        contract_id: str,
        installment_number: int,
        now: datetime,
        amount_collected: Decimal | int | str | None = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
    ) -> InstallmentContract:
        """Record one installment payment and persist the contract."""
        contract = self.store.load_contract(contract_id)
        updated = record_payment(
            contract,
            installment_number,
            amount_collected,
            now,
            late_fee_policy=self.config.late_fee,
            default_policy=self.config.default,
            payment_method=payment_method,
        )
        self.store.save_contract(updated)

        paid = updated.get_payment(installment_number)
        contract_logger(logger, contract_id, installment_number=installment_number).info(
            "Recorded installment %d of contract %s: paid=%s late_fee=%s",
            installment_number,
            updated.contract_number,
            paid.paid_amount,
            paid.late_fee,
        )
        self._publish(
            "installment.payment_recorded",
            updated,
            now,
            {
                "installment_number": installment_number,
                "paid_amount": paid.paid_amount,
                "late_fee": paid.late_fee,
                "payment_method": payment_method,
            },
        )
        self._publish_transition(contract, updated, now)
        return updated

    def record_payments(
        self,
        instructions: Iterable[PaymentInstruction],
        now: datetime,
    ) -> list[BatchItemResult]:
        """Apply a batch of payments, reporting an outcome per instruction.

        Engine errors are classified per item; any other exception aborts the
        batch and propagates.
        """
        results = []
        for instruction in instructions:
            try:
                self.record_payment(
                    instruction.contract_id,
                    instruction.installment_number,
                    now,
                    amount_collected=instruction.amount_collected,
                    payment_method=instruction.payment_method,
                )
            except InstallmentError as exc:
                outcome = classify_error(exc)
                contract_logger(
                    logger,
                    instruction.contract_id,
                    installment_number=instruction.installment_number,
                    outcome=outcome.value,
                ).warning(
                    "Payment %s/%d not applied (%s): %s",
                    instruction.contract_id,
                    instruction.installment_number,
                    outcome.value,
                    exc,
                )
                results.append(BatchItemResult(instruction, outcome, exc))
            else:
                results.append(BatchItemResult(instruction, OutcomeKind.APPLIED))

        applied = sum(1 for r in results if r.ok)
        logger.info("Batch complete: %d/%d payments applied", applied, len(results))
        return results

    def cancel_contract(
        self,
        contract_id: str,
        now: datetime,
        reason: str | None = None,
    ) -> InstallmentContract:
        """Cancel a contract administratively."""
        contract = self.store.load_contract(contract_id)
        updated = contract_ops.cancel_contract(contract, now, reason)
        self.store.save_contract(updated)

        logger.info("Cancelled contract %s", updated.contract_number)
        self._publish_transition(contract, updated, now)
        return updated

    def contract_status(self, contract_id: str, now: datetime) -> ContractStatusReport:
        """Derive a stored contract's current standing."""
        contract = self.store.load_contract(contract_id)
        return derive_contract_status(
            contract, now, self.config.default, self.config.late_fee
        )

    def refresh_statuses(self, now: datetime) -> list[InstallmentContract]:
        """Persist derived statuses for every open contract; return those that changed."""
        changed = []
        for contract in list(self.store.contracts.values()):
            if contract.status in TERMINAL_STATUSES:
                continue
            updated = refresh_contract_status(
                contract, now, self.config.default, self.config.late_fee
            )
            if updated.status != contract.status:
                self.store.save_contract(updated)
                self._publish_transition(contract, updated, now)
                changed.append(updated)

        logger.info("Status refresh: %d contracts changed", len(changed))
        return changed

    def portfolio_statistics(self, now: datetime) -> PortfolioStatistics:
        """Statistics over every stored contract."""
        return compute_portfolio_statistics(
            self.store.contracts.values(), now, self.config.default, self.config.late_fee
        )

    def _publish_transition(
        self,
        before: InstallmentContract,
        after: InstallmentContract,
        now: datetime,
    ) -> None:
        if before.status == after.status:
            return
        contract_logger(logger, after.contract_id).info(
            "Contract %s status %s -> %s",
            after.contract_number,
            before.status.value,
            after.status.value,
        )
        self._publish(
            "installment.contract_status_changed",
            after,
            now,
            {"from_status": before.status, "to_status": after.status},
        )

    def _publish(
        self,
        event_type: str,
        contract: InstallmentContract,
        now: datetime,
        data: dict[str, Any],
    ) -> None:
        if self.publisher is None:
            return
        event = Event(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            event_time=now,
            source=EVENT_SOURCE,
            subject=contract.contract_id,
            data=data,
        )
        self.publisher.send(self.config.events_topic, event)


__all__ = [
    "BatchItemResult",
    "EventPublisher",
    "InstallmentService",
    "OutcomeKind",
    "PaymentInstruction",
    "classify_error",
]
