"""Tests for serialization and sinks."""

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from installments.config import KafkaConfig
from installments.exceptions import SinkError
from installments.models import ContractStatus, Event, InstallmentContract, PaymentStatus
from installments.sinks import JsonFileSink
from installments.sinks.serialization import serialize_value, to_dict


def make_event() -> Event:
    return Event(
        event_id="evt-1",
        event_type="installment.payment_recorded",
        event_time=datetime(2024, 3, 5, 9, 30),
        source="installments.service",
        subject="ct-001",
        data={"installment_number": 1, "paid_amount": Decimal("7996.39")},
    )


class TestSerialization:
    """Tests for serialization helpers."""

    def test_serialize_values(self) -> None:
        assert serialize_value(Decimal("7996.39")) == "7996.39"
        assert serialize_value(ContractStatus.DEFAULTED) == "DEFAULTED"
        assert serialize_value(date(2024, 3, 5)) == "2024-03-05"
        assert serialize_value(datetime(2024, 3, 5, 9, 30)) == "2024-03-05T09:30:00"
        assert serialize_value((1, Decimal("2"))) == [1, "2"]
        assert serialize_value(None) is None

    def test_contract_to_dict(self, contract: InstallmentContract) -> None:
        data = to_dict(contract)

        assert data["status"] == "ACTIVE"
        assert data["financed_amount"] == "90000.00"
        assert data["terms"]["plan_id"] == "PLAN012"
        assert data["payments"][0]["status"] == PaymentStatus.PAID.value
        assert data["payments"][3]["paid_date"] is None
        json.dumps(data)

    def test_event_to_dict(self) -> None:
        data = to_dict(make_event())

        assert data["data"] == {"installment_number": 1, "paid_amount": "7996.39"}
        assert data["metadata"] == {}

    def test_plain_dict_and_other(self) -> None:
        assert to_dict({"amount": Decimal("1.50")}) == {"amount": "1.50"}
        assert to_dict(42) == {"value": "42"}


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_write_batch(self, tmp_path: Path, contract: InstallmentContract) -> None:
        sink = JsonFileSink(tmp_path / "out", pretty=True)

        path = sink.write_batch("contracts", [contract])

        assert path == tmp_path / "out" / "contracts.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["contract_id"] == "ct-001"
        assert len(data[0]["payments"]) == 12

    def test_send_appends_lines(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)

        sink.send("dev.installments.contract-events", make_event())
        sink.send("dev.installments.contract-events", make_event())
        sink.close()

        lines = (tmp_path / "dev_installments_contract-events.jsonl").read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["subject"] == "ct-001"
        assert sink._counts == {"dev.installments.contract-events": 2}

    def test_write_failure(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        (tmp_path / "contracts.json").mkdir()

        with pytest.raises(SinkError, match="Cannot write"):
            sink.write_batch("contracts", [])


class TestKafkaSink:
    """Tests for KafkaSink."""

    @patch("installments.sinks.kafka.Producer")
    def test_init_with_string(self, mock_producer_class: MagicMock) -> None:
        """Test KafkaSink initialization with a bootstrap string."""
        from installments.sinks.kafka import KafkaSink

        sink = KafkaSink("kafka:9092")

        assert sink.config.bootstrap_servers == "kafka:9092"
        mock_producer_class.assert_called_once_with(KafkaConfig(bootstrap_servers="kafka:9092").to_dict())

    @patch("installments.sinks.kafka.Producer")
    def test_send_keys_by_subject(self, mock_producer_class: MagicMock) -> None:
        """Events are keyed by their subject."""
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer

        sink = KafkaSink(KafkaConfig())
        sink.send("events", make_event())

        call_kwargs = mock_producer.produce.call_args[1]
        assert call_kwargs["topic"] == "events"
        assert call_kwargs["key"] == b"ct-001"
        assert json.loads(call_kwargs["value"])["event_type"] == "installment.payment_recorded"
        assert call_kwargs["headers"] == [("event_type", b"installment.payment_recorded")]
        assert sink.stats.sent == 1
        mock_producer.poll.assert_called_once_with(0)

    @patch("installments.sinks.kafka.Producer")
    def test_send_keys_by_contract_id(self, mock_producer_class: MagicMock) -> None:
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer

        KafkaSink("localhost:9092").send("contracts", {"contract_id": "ct-9"})

        assert mock_producer.produce.call_args[1]["key"] == b"ct-9"

    @patch("installments.sinks.kafka.Producer")
    def test_send_without_key(self, mock_producer_class: MagicMock) -> None:
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer

        KafkaSink("localhost:9092").send("topic", {"id": 1})

        assert mock_producer.produce.call_args[1]["key"] is None
        assert mock_producer.produce.call_args[1]["headers"] is None

    @patch("installments.sinks.kafka.Producer")
    def test_send_buffer_full(self, mock_producer_class: MagicMock) -> None:
        """A full local queue surfaces as SinkError."""
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer.produce.side_effect = BufferError("queue full")
        mock_producer_class.return_value = mock_producer

        sink = KafkaSink("localhost:9092")
        with pytest.raises(SinkError, match="Cannot produce to events"):
            sink.send("events", make_event())
        assert sink.stats.sent == 0

    @patch("installments.sinks.kafka.Producer")
    def test_write_batch(self, mock_producer_class: MagicMock) -> None:
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer.flush.return_value = 0
        mock_producer_class.return_value = mock_producer

        sink = KafkaSink("localhost:9092")
        sink.write_batch("topic", [{"id": i} for i in range(5)])

        assert mock_producer.produce.call_count == 5
        mock_producer.flush.assert_called_once()

    @patch("installments.sinks.kafka.Producer")
    def test_delivery_callback(self, mock_producer_class: MagicMock) -> None:
        from installments.sinks.kafka import KafkaSink

        sink = KafkaSink("localhost:9092")
        mock_msg = MagicMock()
        mock_msg.topic.return_value = "events"
        mock_msg.partition.return_value = 0
        mock_msg.offset.return_value = 7

        sink._delivery_callback(None, mock_msg)
        sink._delivery_callback("Broker down", None)

        assert sink.stats.delivered == 1
        assert sink.stats.failed == 1
        assert sink.stats.success_rate == 0.5

    @patch("installments.sinks.kafka.Producer")
    def test_close_flushes(self, mock_producer_class: MagicMock) -> None:
        from installments.sinks.kafka import KafkaSink

        mock_producer = MagicMock()
        mock_producer.flush.return_value = 0
        mock_producer_class.return_value = mock_producer

        KafkaSink("localhost:9092").close()

        mock_producer.flush.assert_called_once_with(30.0)

    def test_success_rate_without_deliveries(self) -> None:
        from installments.sinks.kafka import ProducerStats

        assert ProducerStats().success_rate == 0.0
