"""Customer eligibility for installment financing."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from installments.config import EligibilityPolicy
from installments.engine.amortization import compute_amortization_schedule, quantize, to_decimal
from installments.models.customer import Customer
from installments.models.enums import RiskLevel
from installments.models.plan import InstallmentPlan

REQUIRED_FIELDS = ("name", "id_card", "phone", "address", "occupation")

# Standard catalogue ids offered per risk tier
SHORT_TERM_PLANS = ("PLAN003", "PLAN006")
STANDARD_PLAN = "PLAN012"
LONG_TERM_PLANS = ("PLAN024", "PLAN036")


@dataclass
class EligibilityResult:
    """Outcome of an eligibility check."""

    eligible: bool
    risk_level: RiskLevel
    requires_guarantor: bool
    max_amount: Decimal
    estimated_payment: Decimal
    reasons: list[str] = field(default_factory=list)
    recommended_plans: list[str] = field(default_factory=list)


def estimate_monthly_payment(
    amount: Decimal,
    plan: InstallmentPlan | None,
    policy: EligibilityPolicy,
) -> Decimal:
    """Monthly payment the requested amount would cost under ``plan``."""
    if plan is None:
        return quantize(amount * policy.estimated_payment_ratio)
    financed = amount - quantize(amount * to_decimal(plan.down_payment_percent) / 100)
    if financed <= 0:
        return Decimal("0.00")
    return compute_amortization_schedule(financed, plan.interest_rate, plan.number_of_installments).payment


def check_eligibility(
    customer: Customer,
    amount: Decimal | int | str,
    plan: InstallmentPlan | None = None,
    existing_monthly_payments: Decimal | int | str = 0,
    policy: EligibilityPolicy | None = None,
) -> EligibilityResult:
    """Check whether a customer may finance ``amount``.

    Parameters
    ----------
    customer : Customer
        Applicant.
    amount : Decimal | int | str
        Sale amount to be financed.
    plan : InstallmentPlan | None
        Plan under consideration; without one the monthly payment is
        estimated as a flat share of the amount.
    existing_monthly_payments : Decimal | int | str
        Sum of the monthly payments of the customer's active contracts.
    policy : EligibilityPolicy | None
        Thresholds; defaults to :class:`EligibilityPolicy`.

    Returns
    -------
    EligibilityResult
        ``eligible`` is true when no blocking reason was found.
    """
    policy = policy or EligibilityPolicy()
    amount = to_decimal(amount)
    existing = to_decimal(existing_monthly_payments)
    income = to_decimal(customer.monthly_income or 0)

    reasons = [
        f"Missing customer {name.replace('_', ' ')}"
        for name in REQUIRED_FIELDS
        if not str(getattr(customer, name) or "").strip()
    ]
    if income <= 0:
        reasons.append("Monthly income is required")

    risk = RiskLevel.LOW
    if income < policy.low_income:
        risk = RiskLevel.HIGH
    elif income < policy.medium_income:
        risk = RiskLevel.MEDIUM

    max_amount = quantize(income * policy.income_multiplier)
    payment = estimate_monthly_payment(amount, plan, policy)

    if income > 0:
        debt_ratio = (existing + payment) / income
        if debt_ratio > policy.max_debt_ratio:
            reasons.append(
                f"Debt-to-income ratio {debt_ratio:.2f} exceeds {policy.max_debt_ratio}"
            )
            risk = RiskLevel.HIGH
        elif debt_ratio > policy.medium_debt_ratio and risk == RiskLevel.LOW:
            risk = RiskLevel.MEDIUM

    if amount < policy.min_amount:
        reasons.append(f"Amount {amount} is below the minimum {policy.min_amount}")
    if amount > max_amount:
        reasons.append(f"Amount {amount} exceeds the maximum {max_amount}")

    requires_guarantor = (
        amount > policy.guarantor_amount
        or risk == RiskLevel.HIGH
        or income < payment * 3
    )
    recommended = recommend_plans(risk, amount, requires_guarantor, policy)

    if plan is not None:
        requires_guarantor = (
            requires_guarantor
            or plan.requires_guarantor
            or plan.number_of_installments > policy.guarantor_months
        )

    return EligibilityResult(
        eligible=not reasons,
        risk_level=risk,
        requires_guarantor=requires_guarantor,
        max_amount=max_amount,
        estimated_payment=payment,
        reasons=reasons,
        recommended_plans=recommended,
    )


def recommend_plans(
    risk: RiskLevel,
    amount: Decimal,
    requires_guarantor: bool,
    policy: EligibilityPolicy,
) -> list[str]:
    """Standard plans suited to a risk tier.

    Low-risk customers get the short and 12-month plans, plus the long
    plans above ``policy.long_term_amount``. Medium risk is limited to short
    plans, with the 24-month plan when a guarantor is needed anyway. High
    risk is only offered the 24-month plan, backed by a guarantor.
    """
    if risk == RiskLevel.LOW:
        plans = [*SHORT_TERM_PLANS, STANDARD_PLAN]
        if amount > policy.long_term_amount:
            plans.extend(LONG_TERM_PLANS)
        return plans
    if risk == RiskLevel.MEDIUM:
        plans = list(SHORT_TERM_PLANS)
        if requires_guarantor:
            plans.append(LONG_TERM_PLANS[0])
        return plans
    return [LONG_TERM_PLANS[0]] if requires_guarantor else []
