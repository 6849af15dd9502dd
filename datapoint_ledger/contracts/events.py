"""
Event Contracts

Immutable records produced by the service while it runs.
They describe what happened; they never drive behavior.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class AuditEventType(Enum):
    """Explicit audit event types."""
    STATE_CHANGE = "state_change"
    QUERY = "query"
    ERROR = "error"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: datetime
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    def metadata_value(self, key: str) -> Optional[str]:
        for k, v in self.metadata:
            if k == key:
                return v
        return None
