"""Output sinks for contract events and exports."""

from installments.sinks.json_file import JsonFileSink
from installments.sinks.kafka import KafkaSink

__all__ = ["JsonFileSink", "KafkaSink"]
