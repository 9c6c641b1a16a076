"""Base models shared across the installments engine."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Event:
    """Standard event envelope for publishing contract changes."""

    event_id: str
    event_type: str  # entity.action (e.g., installment.payment_recorded)
    event_time: datetime
    source: str  # Service/system that generated
    subject: str  # Entity ID affected
    data: dict
    metadata: dict = field(default_factory=dict)
