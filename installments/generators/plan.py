"""Installment plan catalogue."""

from decimal import Decimal

from installments.generators.base import BaseGenerator
from installments.models import InstallmentPlan


class PlanGenerator(BaseGenerator):
    """Build the standard plan catalogue and random variations of it."""

    # (installments, annual rate %, down payment %, processing fee, guarantor)
    STANDARD_TERMS = {
        "PLAN003": (3, Decimal("0"), Decimal("10"), Decimal("0"), False),
        "PLAN006": (6, Decimal("6"), Decimal("10"), Decimal("200"), False),
        "PLAN012": (12, Decimal("12"), Decimal("15"), Decimal("300"), False),
        "PLAN024": (24, Decimal("15"), Decimal("20"), Decimal("500"), False),
        "PLAN036": (36, Decimal("18"), Decimal("25"), Decimal("500"), True),
    }

    def standard_catalog(self) -> list[InstallmentPlan]:
        """Return the standard plans."""
        return [
            InstallmentPlan(
                plan_id=plan_id,
                name=f"{months}-month installments",
                number_of_installments=months,
                interest_rate=rate,
                down_payment_percent=down,
                processing_fee=fee,
                min_amount=Decimal("1000"),
                requires_guarantor=guarantor,
            )
            for plan_id, (months, rate, down, fee, guarantor) in self.STANDARD_TERMS.items()
        ]

    def generate(self) -> InstallmentPlan:
        """Generate a random promotional plan."""
        months = self.rng.choice([3, 6, 10, 12, 18, 24])
        return InstallmentPlan(
            plan_id=f"PROMO-{self.fake.unique.random_int(100, 999)}",
            name=f"Promotion {months} months",
            number_of_installments=months,
            interest_rate=Decimal(self.rng.choice([0, 0, 3, 6, 9])),
            down_payment_percent=Decimal(self.rng.choice([0, 5, 10, 20])),
            min_amount=Decimal("3000"),
            max_amount=Decimal(self.rng.choice([50_000, 100_000, 200_000])),
        )
