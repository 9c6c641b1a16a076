"""In-memory contract store with referential integrity."""

from dataclasses import dataclass, field, replace

from installments.exceptions import (
    ContractNotFoundError,
    InvalidEntityStateError,
    PlanNotFoundError,
    ReferentialIntegrityError,
)
from installments.models import Customer, InstallmentContract, InstallmentPlan
from installments.models.enums import ContractStatus


@dataclass
class InstallmentDataStore:
    """In-memory store for plans, customers and contracts."""

    plans: dict[str, InstallmentPlan] = field(default_factory=dict)
    customers: dict[str, Customer] = field(default_factory=dict)
    contracts: dict[str, InstallmentContract] = field(default_factory=dict)

    # Relationship indexes
    _customer_contracts: dict[str, list[str]] = field(default_factory=dict)

    def add_plan(self, plan: InstallmentPlan) -> None:
        """Add or replace a plan. Existing contracts keep their own terms."""
        self.plans[plan.plan_id] = plan

    def add_customer(self, customer: Customer) -> None:
        """Add a customer to the store."""
        self.customers[customer.customer_id] = customer
        self._customer_contracts.setdefault(customer.customer_id, [])

    def add_contract(self, contract: InstallmentContract) -> None:
        """Add a new contract to the store. Stored contracts are never replaced here."""
        if contract.contract_id in self.contracts:
            raise InvalidEntityStateError(f"Contract {contract.contract_id} already exists")

        if contract.customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {contract.customer_id} not found")

        if contract.plan_id not in self.plans:
            raise ReferentialIntegrityError(f"Plan {contract.plan_id} not found")

        self.contracts[contract.contract_id] = contract
        self._customer_contracts[contract.customer_id].append(contract.contract_id)

    def save_contract(self, contract: InstallmentContract) -> None:
        """Replace a stored contract with its updated version."""
        if contract.contract_id not in self.contracts:
            raise ContractNotFoundError(f"Contract {contract.contract_id} not found")
        self.contracts[contract.contract_id] = contract

    def load_contract(self, contract_id: str) -> InstallmentContract:
        """Get a contract with its payments ordered by installment number."""
        contract = self.contracts.get(contract_id)
        if contract is None:
            raise ContractNotFoundError(f"Contract {contract_id} not found")
        ordered = sorted(contract.payments, key=lambda p: p.installment_number)
        if ordered == contract.payments:
            return contract
        return replace(contract, payments=ordered)

    def load_plan(self, plan_id: str) -> InstallmentPlan:
        """Get a plan by id."""
        plan = self.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan {plan_id} not found")
        return plan

    def load_customer(self, customer_id: str) -> Customer:
        """Get a customer by id."""
        customer = self.customers.get(customer_id)
        if customer is None:
            raise ReferentialIntegrityError(f"Customer {customer_id} not found")
        return customer

    # Query methods
    def get_customer_contracts(self, customer_id: str) -> list[InstallmentContract]:
        """Get all contracts for a customer."""
        contract_ids = self._customer_contracts.get(customer_id, [])
        return [self.contracts[cid] for cid in contract_ids]

    def get_contracts_by_status(self, status: ContractStatus) -> list[InstallmentContract]:
        """Get contracts whose stored status matches."""
        return [c for c in self.contracts.values() if c.status == status]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "plans": len(self.plans),
            "customers": len(self.customers),
            "contracts": len(self.contracts),
            "payments": sum(len(c.payments) for c in self.contracts.values()),
        }
