"""Installment plan models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class InstallmentPlan:
    """Reusable financing template.

    Plans may be edited in the store; contracts only ever see the
    :class:`PlanTerms` copied at origination.
    """

    plan_id: str
    name: str
    number_of_installments: int
    interest_rate: Decimal  # Annual percent (e.g., 12 for 12%)
    down_payment_percent: Decimal
    processing_fee: Decimal = Decimal("0")
    min_amount: Decimal = Decimal("0")
    max_amount: Decimal | None = None
    requires_guarantor: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class PlanTerms:
    """Financial terms of a plan as they were when a contract was created."""

    plan_id: str
    number_of_installments: int
    interest_rate: Decimal
    down_payment_percent: Decimal
    processing_fee: Decimal
