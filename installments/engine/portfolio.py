"""Aggregate statistics over a set of contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from installments.config import DefaultPolicy, LateFeePolicy
from installments.engine.status import derive_contract_status
from installments.models.contract import InstallmentContract
from installments.models.enums import ContractStatus


@dataclass
class PortfolioStatistics:
    """Contract counts and balances as of a reference date."""

    total_contracts: int = 0
    by_status: dict[ContractStatus, int] = field(default_factory=dict)
    contracts_with_overdue: int = 0
    total_outstanding: Decimal = Decimal("0.00")
    total_overdue: Decimal = Decimal("0.00")
    total_collected: Decimal = Decimal("0.00")

    def count(self, status: ContractStatus) -> int:
        return self.by_status.get(status, 0)


def compute_portfolio_statistics(
    contracts: Iterable[InstallmentContract],
    now: date | datetime,
    default_policy: DefaultPolicy | None = None,
    late_fee_policy: LateFeePolicy | None = None,
) -> PortfolioStatistics:
    """Summarize contracts by derived status.

    Outstanding and overdue amounts only cover active and defaulted
    contracts; collected amounts include late fees and every contract.
    """
    stats = PortfolioStatistics()

    for contract in contracts:
        report = derive_contract_status(contract, now, default_policy, late_fee_policy)
        stats.total_contracts += 1
        stats.by_status[report.status] = stats.by_status.get(report.status, 0) + 1
        stats.total_collected += sum(
            (p.paid_amount or Decimal("0") for p in contract.payments if p.is_paid),
            Decimal("0.00"),
        )

        if report.status in (ContractStatus.ACTIVE, ContractStatus.DEFAULTED):
            stats.total_outstanding += report.remaining_balance
            stats.total_overdue += report.total_overdue
            if report.overdue_payments:
                stats.contracts_with_overdue += 1

    return stats
