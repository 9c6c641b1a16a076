"""Tests for the exception hierarchy."""

import pytest

from installments.exceptions import (
    ConfigurationError,
    ContractNotFoundError,
    ContractTermsError,
    DegenerateAmortizationError,
    EntityNotFoundError,
    InstallmentError,
    InstallmentNotFoundError,
    InvalidAmortizationInputError,
    InvalidEntityStateError,
    MalformedPaymentScheduleError,
    PaymentAlreadyRecordedError,
    PlanNotFoundError,
    ReferentialIntegrityError,
    SinkError,
    UnderpaymentError,
)


class TestHierarchy:
    """Every error can be caught as InstallmentError."""

    @pytest.mark.parametrize(
        "error_class",
        [
            ConfigurationError,
            ContractTermsError,
            DegenerateAmortizationError,
            EntityNotFoundError,
            InvalidAmortizationInputError,
            InvalidEntityStateError,
            MalformedPaymentScheduleError,
            SinkError,
        ],
    )
    def test_base(self, error_class: type) -> None:
        with pytest.raises(InstallmentError, match="boom"):
            raise error_class("boom")

    @pytest.mark.parametrize(
        "error_class",
        [ContractNotFoundError, PlanNotFoundError, InstallmentNotFoundError, ReferentialIntegrityError],
    )
    def test_not_found(self, error_class: type) -> None:
        assert issubclass(error_class, EntityNotFoundError)

    @pytest.mark.parametrize("error_class", [PaymentAlreadyRecordedError, UnderpaymentError])
    def test_invalid_state(self, error_class: type) -> None:
        assert issubclass(error_class, InvalidEntityStateError)

    def test_not_found_is_not_state_error(self) -> None:
        assert not issubclass(ContractNotFoundError, InvalidEntityStateError)
