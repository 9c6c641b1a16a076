"""Customer model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Customer:
    """Customer applying for or holding installment contracts."""

    customer_id: str
    name: str
    phone: str
    id_card: str
    address: str
    occupation: str
    monthly_income: Decimal
    created_at: datetime
