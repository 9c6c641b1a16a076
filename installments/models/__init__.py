"""Domain models for installment contracts."""

from installments.models.base import Event
from installments.models.contract import InstallmentContract, InstallmentPayment
from installments.models.customer import Customer
from installments.models.enums import (
    TERMINAL_STATUSES,
    ContractStatus,
    PaymentMethod,
    PaymentStatus,
    RiskLevel,
)
from installments.models.plan import InstallmentPlan, PlanTerms

__all__ = [
    "TERMINAL_STATUSES",
    "ContractStatus",
    "Customer",
    "Event",
    "InstallmentContract",
    "InstallmentPayment",
    "InstallmentPlan",
    "PaymentMethod",
    "PaymentStatus",
    "PlanTerms",
    "RiskLevel",
]
