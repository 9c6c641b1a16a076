"""Installment computations: amortization, status, late fees and payments."""

from installments.engine.amortization import Schedule, ScheduleLine, compute_amortization_schedule
from installments.engine.contracts import (
    activate_contract,
    cancel_contract,
    create_contract,
    snapshot_terms,
)
from installments.engine.eligibility import EligibilityResult, check_eligibility
from installments.engine.late_fee import compute_late_fee, days_late
from installments.engine.payments import amount_due, record_payment
from installments.engine.portfolio import PortfolioStatistics, compute_portfolio_statistics
from installments.engine.status import (
    ContractStatusReport,
    derive_contract_status,
    payment_status,
    refresh_contract_status,
)

__all__ = [
    "ContractStatusReport",
    "EligibilityResult",
    "PortfolioStatistics",
    "Schedule",
    "ScheduleLine",
    "activate_contract",
    "amount_due",
    "cancel_contract",
    "check_eligibility",
    "compute_amortization_schedule",
    "compute_late_fee",
    "compute_portfolio_statistics",
    "create_contract",
    "days_late",
    "derive_contract_status",
    "payment_status",
    "record_payment",
    "refresh_contract_status",
    "snapshot_terms",
]
