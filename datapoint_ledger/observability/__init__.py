"""
Observability & Audit Layer

RESPONSIBILITY: Recording what each transaction did
ALLOWED INPUTS: Audit entries from the core
OUTPUTS: Read-only, filterable audit history

WHAT THIS LAYER MUST NOT DO:
============================
- Modify ledger behavior
- Filter entries on write
- Keep more than max_entries entries (oldest are evicted first)
- Block or delay transactions
"""

from __future__ import annotations
from collections import deque
from typing import Deque, List, Optional, Tuple
import hashlib

from ..contracts.events import AuditEventType, AuditLogEntry


class AuditLog:
    """
    Append-only audit collector.

    One collector per service instance. Entries are immutable; once
    max_entries is reached the oldest entry is evicted for each new one.
    """

    def __init__(self, layer_name: str = "core", max_entries: int = 10000):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._sequence: int = 0

    def record(
        self,
        event_type: AuditEventType,
        action: str,
        entity_id: Optional[str] = None,
        metadata: Tuple[Tuple[str, str], ...] = ()
    ) -> AuditLogEntry:
        """Create and append an entry; returns it for caller reference."""
        self._sequence += 1
        timestamp = AuditLogEntry.now()
        entry_hash = hashlib.sha256(
            f"{self._layer_name}_{action}|{entity_id}|{self._sequence}|{timestamp.isoformat()}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_hash}",
            event_type=event_type,
            timestamp=timestamp,
            layer=self._layer_name,
            action=action,
            entity_id=entity_id,
            metadata=metadata
        )
        self._entries.append(entry)
        return entry

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        entity_id: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = list(self._entries)

        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        if entity_id is not None:
            entries = [e for e in entries if e.entity_id == entity_id]

        return entries

    @property
    def entry_count(self) -> int:
        return len(self._entries)


__all__ = ['AuditLog']
