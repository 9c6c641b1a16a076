"""Installment contract and payment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from installments.models.enums import ContractStatus, PaymentMethod, PaymentStatus
from installments.models.plan import PlanTerms


@dataclass
class InstallmentPayment:
    """One scheduled installment (งวด) of a contract."""

    payment_id: str
    contract_id: str
    installment_number: int  # 1, 2, 3, ...
    due_date: date
    amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    paid_date: date | None = None
    paid_amount: Decimal | None = None
    late_fee: Decimal | None = None  # Fee applied at collection
    payment_method: PaymentMethod | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID


@dataclass
class InstallmentContract:
    """A customer's financed purchase and its payment schedule."""

    contract_id: str
    contract_number: str
    customer_id: str
    plan_id: str
    terms: PlanTerms
    total_amount: Decimal
    down_payment: Decimal
    financed_amount: Decimal
    monthly_payment: Decimal
    processing_fee: Decimal
    status: ContractStatus
    contract_date: date
    payments: list[InstallmentPayment] = field(default_factory=list)
    guarantor_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def get_payment(self, installment_number: int) -> InstallmentPayment | None:
        """Return the payment with the given number, if any."""
        for payment in self.payments:
            if payment.installment_number == installment_number:
                return payment
        return None
