"""Custom exception hierarchy for the installments engine."""


class InstallmentError(Exception):
    """Base exception for all installments errors."""


class EntityNotFoundError(InstallmentError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class ContractNotFoundError(EntityNotFoundError):
    """Raised when a contract id is unknown to the store."""


class PlanNotFoundError(EntityNotFoundError):
    """Raised when a plan id is unknown to the store."""


class InstallmentNotFoundError(EntityNotFoundError):
    """Raised when a contract has no installment with the given number."""


class InvalidEntityStateError(InstallmentError):
    """Raised when an entity is in an invalid state for the operation."""


class PaymentAlreadyRecordedError(InvalidEntityStateError):
    """Raised when an installment is already paid."""


class UnderpaymentError(InvalidEntityStateError):
    """Raised when the collected amount does not cover the amount due."""


class InvalidAmortizationInputError(InstallmentError):
    """Raised for a non-positive principal or count, or a negative rate."""


class DegenerateAmortizationError(InstallmentError):
    """Raised when the annuity formula cannot be evaluated."""


class MalformedPaymentScheduleError(InstallmentError):
    """Raised when a payment schedule is empty or not numbered 1..n."""


class ContractTermsError(InstallmentError):
    """Raised when a sale does not satisfy the financing terms of a plan."""


class ConfigurationError(InstallmentError):
    """Raised when configuration is invalid or missing."""


class SinkError(InstallmentError):
    """Raised when a sink operation fails."""
