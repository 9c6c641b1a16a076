"""Tests for configuration and logging."""

import io
import json
import logging
import os
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from installments.config import (
    DefaultPolicy,
    InstallmentsConfig,
    KafkaConfig,
    LateFeePolicy,
)
from installments.exceptions import ConfigurationError
from installments.logging import JsonFormatter, contract_logger, get_logger, setup_logging


class TestPolicies:
    """Tests for policy validation."""

    def test_late_fee_defaults(self) -> None:
        policy = LateFeePolicy()

        assert policy.daily_rate == Decimal("0.01")
        assert policy.max_fee_ratio == Decimal("0.10")

    def test_negative_late_fee(self) -> None:
        with pytest.raises(ConfigurationError):
            LateFeePolicy(daily_rate=Decimal("-0.01"))
        with pytest.raises(ConfigurationError):
            LateFeePolicy(max_fee_ratio=Decimal("-1"))

    def test_default_policy_validation(self) -> None:
        with pytest.raises(ConfigurationError):
            DefaultPolicy(max_overdue_installments=-1)
        with pytest.raises(ConfigurationError):
            DefaultPolicy(max_overdue_ratio=Decimal("1.5"))

        assert DefaultPolicy(max_overdue_ratio=Decimal("0.25")).max_overdue_ratio == Decimal("0.25")


class TestInstallmentsConfig:
    """Tests for InstallmentsConfig."""

    def test_defaults(self) -> None:
        config = InstallmentsConfig()

        assert config.events_topic == "dev.installments.contract-events"
        assert config.default.max_overdue_installments == 3
        assert config.seed is None

    def test_kafka_to_dict(self) -> None:
        assert KafkaConfig(bootstrap_servers="kafka:9092").to_dict()["bootstrap.servers"] == "kafka:9092"

    def test_from_env_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = InstallmentsConfig.from_env()

        assert config.late_fee == LateFeePolicy()
        assert config.default == DefaultPolicy()
        assert config.output.json_output_dir == Path("output")

    def test_from_env(self) -> None:
        env = {
            "LATE_FEE_DAILY_RATE": "0.005",
            "LATE_FEE_MAX_RATIO": "0.2",
            "DEFAULT_MAX_OVERDUE": "2",
            "DEFAULT_MAX_OVERDUE_RATIO": "0.5",
            "DEFAULT_ALLOW_RECOVERY": "false",
            "KAFKA_BOOTSTRAP_SERVERS": "kafka:29092",
            "OUTPUT_DIR": "/tmp/installments",
            "PRETTY_JSON": "true",
            "TOPIC_PREFIX": "prod.installments",
            "SEED": "7",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env, clear=True):
            config = InstallmentsConfig.from_env()

        assert config.late_fee.daily_rate == Decimal("0.005")
        assert config.late_fee.max_fee_ratio == Decimal("0.2")
        assert config.default == DefaultPolicy(2, Decimal("0.5"), False)
        assert config.kafka.bootstrap_servers == "kafka:29092"
        assert config.output.pretty_json is True
        assert config.events_topic == "prod.installments.contract-events"
        assert config.seed == 7
        assert config.log_level == "DEBUG"

    def test_from_env_bad_decimal(self) -> None:
        with patch.dict(os.environ, {"LATE_FEE_DAILY_RATE": "one percent"}, clear=True):
            with pytest.raises(ConfigurationError, match="LATE_FEE_DAILY_RATE"):
                InstallmentsConfig.from_env()


class TestLogging:
    """Tests for logging helpers."""

    def test_setup_standard(self) -> None:
        stream = io.StringIO()
        setup_logging("DEBUG", stream=stream)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("confluent_kafka").level == logging.WARNING

        logging.getLogger("installments.test").info("hello")
        assert "| INFO     | installments.test | hello" in stream.getvalue()

    def test_setup_unknown_level(self) -> None:
        setup_logging("chatty", stream=io.StringIO())

        assert logging.getLogger().level == logging.INFO

    def test_setup_json(self) -> None:
        stream = io.StringIO()
        setup_logging("info", format_type="json", stream=stream)

        assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)
        contract_logger(logging.getLogger("installments.test"), "ct-001").info("paid")
        data = json.loads(stream.getvalue().splitlines()[-1])
        assert data["message"] == "paid"
        assert data["contract_id"] == "ct-001"

    def test_json_formatter(self) -> None:
        record = logging.LogRecord(
            name="installments.service",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Recorded installment %d",
            args=(4,),
            exc_info=None,
        )
        record.installment_number = 4
        record.extra = {"late_fee": Decimal("12.50")}

        data = json.loads(JsonFormatter().format(record))

        assert data["message"] == "Recorded installment 4"
        assert data["level"] == "INFO"
        assert data["installment_number"] == 4
        assert data["late_fee"] == "12.50"
        assert "contract_id" not in data

    def test_json_formatter_exception(self) -> None:
        try:
            raise ConfigurationError("bad")
        except ConfigurationError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(JsonFormatter().format(record))
        assert "ConfigurationError" in data["exception"]

    def test_contract_logger_merges_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        log = contract_logger(logging.getLogger("installments.test"), "ct-001", customer_id="cust-001")

        with caplog.at_level(logging.INFO, logger="installments.test"):
            log.info("opened", extra={"outcome": "APPLIED"})

        record = caplog.records[-1]
        assert record.contract_id == "ct-001"
        assert record.customer_id == "cust-001"
        assert record.outcome == "APPLIED"

    def test_get_logger(self) -> None:
        assert get_logger("installments.engine").name == "installments.engine"
