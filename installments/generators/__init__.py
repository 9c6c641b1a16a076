"""Sample-data generators for installment contracts."""

from installments.generators.behavior import PaymentBehavior, PlannedPayment
from installments.generators.customer import CustomerGenerator
from installments.generators.plan import PlanGenerator

__all__ = ["CustomerGenerator", "PaymentBehavior", "PlanGenerator", "PlannedPayment"]
