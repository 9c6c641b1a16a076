"""Installment portfolio scenario with simulated payment history."""

from __future__ import annotations

import logging
import random
from datetime import datetime, time, timedelta
from decimal import Decimal

from installments.config import InstallmentsConfig
from installments.generators import CustomerGenerator, PaymentBehavior, PlanGenerator
from installments.service import EventPublisher, InstallmentService
from installments.store import InstallmentDataStore

logger = logging.getLogger(__name__)


class PortfolioScenario:
    """Generate customers, contracts and their payment history.

    Contracts are opened and paid through :class:`InstallmentService`, so the
    resulting store only holds states the engine can actually produce:

    - Customers across income bands
    - Contracts on the standard plan catalogue, subject to eligibility
    - Payments replayed day by day up to the reference time, on time,
      late (with late fees) or not at all
    """

    def __init__(
        self,
        num_customers: int = 100,
        contract_rate: float = 0.6,
        reference_time: datetime | None = None,
        seed: int | None = None,
        *,
        config: InstallmentsConfig | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        """Initialize portfolio scenario.

        Parameters
        ----------
        num_customers : int
            Number of customers to generate.
        contract_rate : float
            Share of customers that try to open a contract (0.0 to 1.0).
        reference_time : datetime | None
            Simulation end; defaults to now.
        seed : int | None
            Random seed for reproducibility.
        config : InstallmentsConfig | None
            Policies used by the service.
        publisher : EventPublisher | None
            Optional sink receiving contract events.
        """
        self.num_customers = num_customers
        self.contract_rate = contract_rate
        self.reference_time = reference_time or datetime.now()
        self.seed = seed
        self.rng = random.Random(seed)

        self.store = InstallmentDataStore()
        self.service = InstallmentService(self.store, config=config, publisher=publisher)
        self.rejected = 0

        self._customer_gen = CustomerGenerator(seed=seed)
        self._plan_gen = PlanGenerator(seed=seed)
        self._behavior = PaymentBehavior(seed=seed)

    def generate(self) -> InstallmentDataStore:
        """Generate all data for the scenario.

        Returns
        -------
        InstallmentDataStore
            Store containing plans, customers and contracts.
        """
        logger.info(
            "Starting portfolio scenario: %d customers, %.0f%% applying",
            self.num_customers,
            self.contract_rate * 100,
        )

        plans = self._plan_gen.standard_catalog()
        for plan in plans:
            self.store.add_plan(plan)

        for _ in range(self.num_customers):
            customer = self._customer_gen.generate(self.reference_time)
            self.store.add_customer(customer)

            if self.rng.random() < self.contract_rate:
                self._open_contract(customer.customer_id, self.rng.choice(plans).plan_id)

        logger.info(
            "Opened %d contracts, rejected %d applications",
            len(self.store.contracts),
            self.rejected,
        )

        self._replay_payments()
        self.service.refresh_statuses(self.reference_time)
        return self.store

    def _open_contract(self, customer_id: str, plan_id: str) -> None:
        amount = Decimal(self.rng.randint(20, 400) * 250)
        opened_at = self.reference_time - timedelta(days=self.rng.randint(15, 720))

        result = self.service.check_eligibility(customer_id, amount, plan_id)
        if not result.eligible:
            self.rejected += 1
            logger.debug("Customer %s rejected: %s", customer_id, result.reasons)
            return

        guarantor_id = self._customer_gen.fake.uuid4() if result.requires_guarantor else None
        self.service.open_contract(
            customer_id,
            plan_id,
            amount,
            now=opened_at,
            guarantor_id=guarantor_id,
        )

    def _replay_payments(self) -> None:
        """Apply planned payments across all contracts in date order."""
        reference_date = self.reference_time.date()
        planned = [
            (payment.paid_on, contract.contract_id, payment.installment_number)
            for contract in self.store.contracts.values()
            for payment in self._behavior.plan_payments(contract, reference_date)
        ]

        for paid_on, contract_id, installment_number in sorted(planned):
            self.service.record_payment(
                contract_id,
                installment_number,
                now=datetime.combine(paid_on, time(10, 0)),
            )

        logger.info("Replayed %d payments", len(planned))
