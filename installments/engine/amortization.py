"""Fixed-payment (annuity) amortization of a financed principal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, getcontext
from functools import lru_cache

from installments.exceptions import DegenerateAmortizationError, InvalidAmortizationInputError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MONTHS_PER_YEAR = 12


def quantize(value: Decimal) -> Decimal:
    """Round a money amount to cents, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class ScheduleLine:
    """Principal/interest split of a single installment."""

    installment_number: int
    amount: Decimal
    principal: Decimal
    interest: Decimal
    balance_after: Decimal


@dataclass(frozen=True)
class Schedule:
    """Amortization schedule of a financed principal."""

    principal: Decimal
    annual_rate_percent: Decimal
    monthly_rate: Decimal
    payment: Decimal
    lines: tuple[ScheduleLine, ...]

    @property
    def installment_count(self) -> int:
        return len(self.lines)

    @property
    def total_interest(self) -> Decimal:
        return sum((line.interest for line in self.lines), Decimal("0"))

    @property
    def total_payable(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))

    def balance_after(self, payments_made: int) -> Decimal:
        """Remaining principal after ``payments_made`` installments."""
        if payments_made <= 0:
            return self.principal
        if payments_made >= len(self.lines):
            return Decimal("0.00")
        return self.lines[payments_made - 1].balance_after


def compute_amortization_schedule(
    principal: Decimal | int | str,
    annual_rate_percent: Decimal | int | str,
    installment_count: int,
) -> Schedule:
    """Compute the fixed-payment schedule for a financed principal.

    Parameters
    ----------
    principal : Decimal | int | str
        Financed amount, must be positive.
    annual_rate_percent : Decimal | int | str
        Annual interest rate in percent (12 means 12% a year).
    installment_count : int
        Number of monthly installments, must be positive.

    Returns
    -------
    Schedule
        Fixed payment and per-installment split. The last installment takes
        the remaining balance, so the principal portions sum to ``principal``
        exactly.

    Raises
    ------
    InvalidAmortizationInputError
        Non-positive count, negative rate, a principal that rounds to
        zero cents, or one too small to give every installment the same
        payment.
    DegenerateAmortizationError
        The annuity denominator vanishes or the computation overflows.
    """
    if isinstance(installment_count, bool) or not isinstance(installment_count, int):
        raise InvalidAmortizationInputError(
            f"Installment count must be an integer, got {installment_count!r}"
        )
    if installment_count <= 0:
        raise InvalidAmortizationInputError(
            f"Installment count must be positive, got {installment_count}"
        )


    try:
        principal_dec = to_decimal(principal)
        rate_dec = to_decimal(annual_rate_percent)
    except InvalidOperation as exc:
        raise InvalidAmortizationInputError(
            f"Invalid amortization amounts: {principal!r}, {annual_rate_percent!r}"
        ) from exc

    if not principal_dec.is_finite():
        raise InvalidAmortizationInputError(f"Principal must be positive, got {principal_dec}")
    if not rate_dec.is_finite() or rate_dec < 0:
        raise InvalidAmortizationInputError(f"Interest rate must be >= 0, got {rate_dec}")

    # Money is held in cents, so the schedule amortizes the rounded principal
    try:
        principal_dec = quantize(principal_dec)
    except InvalidOperation as exc:
        raise InvalidAmortizationInputError(f"Principal {principal_dec} is out of range") from exc
    if principal_dec <= 0:
        raise InvalidAmortizationInputError(f"Principal must be positive, got {principal_dec}")

    return _schedule(principal_dec, _canonical(rate_dec), installment_count)


def _canonical(value: Decimal) -> Decimal:
    """Strip trailing zeros so equal rates share one cache entry (12.0 -> 12)."""
    value = value.normalize()
    if value.as_tuple().exponent > 0 and value.adjusted() < getcontext().prec:
        return value.quantize(Decimal(1))
    return value


@lru_cache(maxsize=1024)
def _schedule(principal: Decimal, annual_rate_percent: Decimal, n: int) -> Schedule:
    monthly_rate = annual_rate_percent / 100 / MONTHS_PER_YEAR

    try:
        if monthly_rate == 0:
            payment = quantize(principal / n)
        else:
            growth = (1 + monthly_rate) ** n
            denominator = growth - 1
            if denominator == 0:
                raise DegenerateAmortizationError(
                    f"Annuity denominator is zero for rate {annual_rate_percent}% over {n} installments"
                )
            payment = quantize(principal * (monthly_rate * growth) / denominator)
    except (Overflow, InvalidOperation) as exc:
        raise DegenerateAmortizationError(
            f"Cannot amortize {principal} at {annual_rate_percent}% over {n} installments"
        ) from exc

    if payment <= 0:
        raise InvalidAmortizationInputError(
            f"Principal {principal} is too small to spread over {n} installments"
        )
    lines = _split(principal, monthly_rate, payment, n)

    logger.debug(
        "Amortized %s at %s%% over %d installments: payment=%s", principal, annual_rate_percent, n, payment
    )
    return Schedule(
        principal=principal,
        annual_rate_percent=annual_rate_percent,
        monthly_rate=monthly_rate,
        payment=payment,
        lines=lines,
    )


def _split(principal: Decimal, monthly_rate: Decimal, payment: Decimal, n: int) -> tuple[ScheduleLine, ...]:
    """Split each installment into principal and interest.

    Every installment but the last pays exactly ``payment``; the last one
    retires whatever balance is left.
    """
    balance = principal
    lines = []

    for number in range(1, n + 1):
        interest = quantize(balance * monthly_rate)
        if number == n:
            principal_part = balance
        else:
            principal_part = payment - interest
            if principal_part >= balance:
                raise InvalidAmortizationInputError(
                    f"Payment {payment} retires principal {principal} before installment {n}"
                )
        balance -= principal_part

        lines.append(
            ScheduleLine(
                installment_number=number,
                amount=principal_part + interest,
                principal=principal_part,
                interest=interest,
                balance_after=balance,
            )
        )

    return tuple(lines)
