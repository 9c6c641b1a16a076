"""Configuration management for the installments engine."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from installments.exceptions import ConfigurationError


@dataclass(frozen=True)
class LateFeePolicy:
    """Percentage-per-day late fee, capped at a fraction of the installment."""

    daily_rate: Decimal = Decimal("0.01")
    max_fee_ratio: Decimal = Decimal("0.10")

    def __post_init__(self) -> None:
        if self.daily_rate < 0:
            raise ConfigurationError(f"Late fee daily rate must be >= 0, got {self.daily_rate}")
        if self.max_fee_ratio < 0:
            raise ConfigurationError(f"Late fee cap must be >= 0, got {self.max_fee_ratio}")


@dataclass(frozen=True)
class DefaultPolicy:
    """When a contract with overdue installments counts as defaulted.

    A contract defaults when more than ``max_overdue_installments`` payments
    are overdue, or, if ``max_overdue_ratio`` is set, when the overdue amount
    exceeds that fraction of the financed amount. ``allow_recovery`` lets a
    defaulted contract return to active once it no longer meets either
    criterion.
    """

    max_overdue_installments: int = 3
    max_overdue_ratio: Decimal | None = None
    allow_recovery: bool = True

    def __post_init__(self) -> None:
        if self.max_overdue_installments < 0:
            raise ConfigurationError(
                f"max_overdue_installments must be >= 0, got {self.max_overdue_installments}"
            )
        if self.max_overdue_ratio is not None and not 0 <= self.max_overdue_ratio <= 1:
            raise ConfigurationError(
                f"max_overdue_ratio must be within [0, 1], got {self.max_overdue_ratio}"
            )


@dataclass(frozen=True)
class EligibilityPolicy:
    """Thresholds for installment eligibility checks."""

    max_debt_ratio: Decimal = Decimal("0.4")
    medium_debt_ratio: Decimal = Decimal("0.3")
    income_multiplier: int = 20
    min_amount: Decimal = Decimal("1000")
    guarantor_amount: Decimal = Decimal("100000")
    guarantor_months: int = 24
    low_income: Decimal = Decimal("15000")
    medium_income: Decimal = Decimal("25000")
    # Share of the requested amount assumed as monthly payment when no plan is given
    estimated_payment_ratio: Decimal = Decimal("0.05")
    # Above this amount low-risk customers are also offered the long plans
    long_term_amount: Decimal = Decimal("50000")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class InstallmentsConfig:
    """Main configuration for the installments engine."""

    late_fee: LateFeePolicy = field(default_factory=LateFeePolicy)
    default: DefaultPolicy = field(default_factory=DefaultPolicy)
    eligibility: EligibilityPolicy = field(default_factory=EligibilityPolicy)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    topic_prefix: str = "dev.installments"
    seed: int | None = None
    log_level: str = "INFO"

    @property
    def events_topic(self) -> str:
        """Topic that contract events are published to."""
        return f"{self.topic_prefix}.contract-events"

    @classmethod
    def from_env(cls) -> "InstallmentsConfig":
        """Create config from environment variables."""
        import os

        late_fee = LateFeePolicy(
            daily_rate=_decimal_env("LATE_FEE_DAILY_RATE", "0.01"),
            max_fee_ratio=_decimal_env("LATE_FEE_MAX_RATIO", "0.10"),
        )

        ratio = os.getenv("DEFAULT_MAX_OVERDUE_RATIO")
        default = DefaultPolicy(
            max_overdue_installments=int(os.getenv("DEFAULT_MAX_OVERDUE", "3")),
            max_overdue_ratio=_decimal_env("DEFAULT_MAX_OVERDUE_RATIO", ratio) if ratio else None,
            allow_recovery=os.getenv("DEFAULT_ALLOW_RECOVERY", "true").lower() == "true",
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            late_fee=late_fee,
            default=default,
            kafka=kafka,
            output=output,
            topic_prefix=os.getenv("TOPIC_PREFIX", "dev.installments"),
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _decimal_env(name: str, default: str) -> Decimal:
    """Read a decimal environment variable."""
    import os

    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} is not a decimal: {raw!r}") from exc
