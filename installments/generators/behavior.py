"""Simulated customer payment behavior."""

import random
from dataclasses import dataclass
from datetime import date, timedelta

from installments.models import InstallmentContract


@dataclass(frozen=True)
class PlannedPayment:
    """When and which installment a simulated customer pays."""

    installment_number: int
    paid_on: date


class PaymentBehavior:
    """Decide when simulated customers pay their installments."""

    BEHAVIORS = ("good", "occasional_late", "chronic_late", "defaulter")

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)

    def plan_payments(
        self,
        contract: InstallmentContract,
        reference_date: date,
        on_time_rate: float = 0.80,
        late_rate: float = 0.15,
        default_rate: float = 0.05,
    ) -> list[PlannedPayment]:
        """Plan payments for installments due up to ``reference_date``.

        Parameters
        ----------
        contract : InstallmentContract
            Contract whose installments are paid.
        reference_date : date
            Simulation date; nothing is paid after it.
        on_time_rate : float
            Share of customers paying within three days.
        late_rate : float
            Share of customers paying late (mostly occasionally).
        default_rate : float
            Share of customers that stop paying.

        Returns
        -------
        list[PlannedPayment]
            Payments in chronological order.
        """
        behavior = self.rng.choices(
            self.BEHAVIORS,
            weights=[on_time_rate, late_rate * 0.7, late_rate * 0.3, default_rate],
            k=1,
        )[0]
        stop_after = self.rng.randint(0, len(contract.payments)) if behavior == "defaulter" else None

        planned = []
        for payment in sorted(contract.payments, key=lambda p: p.installment_number):
            if stop_after is not None and payment.installment_number > stop_after:
                break

            if behavior == "good":
                delay = self.rng.randint(-5, 3)
            elif behavior == "occasional_late":
                delay = self.rng.randint(5, 20) if self.rng.random() < 0.3 else self.rng.randint(-3, 2)
            else:
                delay = self.rng.randint(10, 45)

            paid_on = payment.due_date + timedelta(days=delay)
            if paid_on > reference_date:
                break
            planned.append(PlannedPayment(payment.installment_number, paid_on))

        return sorted(planned, key=lambda p: (p.paid_on, p.installment_number))
