"""Pytest configuration and fixtures."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from installments.engine.contracts import activate_contract, create_contract
from installments.models import (
    ContractStatus,
    Customer,
    InstallmentContract,
    InstallmentPlan,
    PaymentStatus,
)

REFERENCE_TIME = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def reference_time() -> datetime:
    """Fixed "now" for status and fee computations."""
    return REFERENCE_TIME


@pytest.fixture
def plan() -> InstallmentPlan:
    """12 installments at 12% a year with 10% down."""
    return InstallmentPlan(
        plan_id="PLAN012",
        name="12-month installments",
        number_of_installments=12,
        interest_rate=Decimal("12"),
        down_payment_percent=Decimal("10"),
        processing_fee=Decimal("300"),
        min_amount=Decimal("1000"),
        max_amount=Decimal("500000"),
    )


@pytest.fixture
def customer() -> Customer:
    """Customer with a comfortable income."""
    return Customer(
        customer_id="cust-001",
        name="Somchai Jaidee",
        phone="081-234-5678",
        id_card="1103700012345",
        address="99 Sukhumvit Rd, Bangkok",
        occupation="Engineer",
        monthly_income=Decimal("50000"),
        created_at=datetime(2023, 1, 1),
    )


def make_contract(
    plan: InstallmentPlan,
    contract_date: date,
    paid: tuple[int, ...] = (),
    status: ContractStatus = ContractStatus.ACTIVE,
    total_amount: Decimal = Decimal("100000"),
    contract_id: str = "ct-001",
) -> InstallmentContract:
    """Build a contract whose ``paid`` installments were settled on their due date."""
    contract = activate_contract(
        create_contract(
            contract_id=contract_id,
            customer_id="cust-001",
            plan=plan,
            total_amount=total_amount,
            contract_date=contract_date,
            created_at=datetime.combine(contract_date, datetime.min.time()),
        ),
        datetime.combine(contract_date, datetime.min.time()),
    )
    payments = [
        replace(
            p,
            status=PaymentStatus.PAID,
            paid_date=p.due_date,
            paid_amount=p.amount,
            late_fee=Decimal("0.00"),
        )
        if p.installment_number in paid
        else p
        for p in contract.payments
    ]
    return replace(contract, payments=payments, status=status)


@pytest.fixture
def contract(plan: InstallmentPlan) -> InstallmentContract:
    """Active contract opened 2024-02-05; installment 4 is due 2024-06-05."""
    return make_contract(plan, date(2024, 2, 5), paid=(1, 2, 3))


@pytest.fixture
def contract_factory(plan: InstallmentPlan):
    """Factory building contracts on the default plan."""

    def factory(contract_date: date, **kwargs) -> InstallmentContract:
        return make_contract(kwargs.pop("plan", plan), contract_date, **kwargs)

    return factory
