"""Customer generator."""

from datetime import datetime, timedelta
from decimal import Decimal

from installments.generators.base import BaseGenerator
from installments.models import Customer


class CustomerGenerator(BaseGenerator):
    """Generate synthetic installment customers."""

    # Monthly income bands (THB) and their weights
    INCOME_BANDS = [
        ((9_000, 15_000), 0.30),
        ((15_000, 25_000), 0.40),
        ((25_000, 60_000), 0.25),
        ((60_000, 150_000), 0.05),
    ]

    def generate(self, reference_time: datetime | None = None) -> Customer:
        """Generate a customer.

        Parameters
        ----------
        reference_time : datetime | None
            Upper bound for the customer's creation time.

        Returns
        -------
        Customer
            Generated customer.
        """
        reference_time = reference_time or datetime.now()
        bands, weights = zip(*self.INCOME_BANDS)
        low, high = self.rng.choices(bands, weights=weights, k=1)[0]
        income = self.rng.randint(low // 100, high // 100) * 100

        return Customer(
            customer_id=self.fake.uuid4(),
            name=self.fake.name(),
            phone=self.fake.phone_number(),
            id_card="".join(str(self.rng.randint(0, 9)) for _ in range(13)),
            address=self.fake.address().replace("\n", " "),
            occupation=self.fake.job(),
            monthly_income=Decimal(income),
            created_at=reference_time - timedelta(days=self.rng.randint(30, 3 * 365)),
        )
