"""
Record Contracts

The DataPoint is the only entity stored on the ledger.
It is immutable: every mutation produces a new DataPoint via the
with_* helpers, and the caller rewrites the whole record.

WIRE FORMAT:
============
{"Alert": str, "ID": str, "Owner": str, "Temperature": number, "docType": "dataPoint"}
Any other keys found in a stored document are kept in `extras` and
written back unchanged. Keys are sorted and separators compact so
identical field values always serialize to identical bytes.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple, Union
import json

from .base import DOC_TYPE_DATA_POINT, RecordDecodeError
from ..domain.serialization import canonical_bytes, normalize_number

Number = Union[int, float]

FIELD_DOC_TYPE = "docType"
FIELD_ID = "ID"
FIELD_TEMPERATURE = "Temperature"
FIELD_ALERT = "Alert"
FIELD_OWNER = "Owner"

KNOWN_FIELDS = frozenset({FIELD_DOC_TYPE, FIELD_ID, FIELD_TEMPERATURE, FIELD_ALERT, FIELD_OWNER})


@dataclass(frozen=True)
class DataPoint:
    """Immutable environmental reading owned by one organization."""
    point_id: str
    temperature: Number
    alert: str
    owner: str
    doc_type: str = DOC_TYPE_DATA_POINT
    extras: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'temperature', normalize_number(self.temperature))

    def with_temperature(self, temperature: Number, alert: str) -> DataPoint:
        return replace(self, temperature=temperature, alert=alert)

    def with_alert(self, alert: str) -> DataPoint:
        return replace(self, alert=alert)

    def with_owner(self, owner: str) -> DataPoint:
        return replace(self, owner=owner)

    def to_dict(self) -> Dict[str, Any]:
        document = dict(self.extras)
        document.update({
            FIELD_DOC_TYPE: self.doc_type,
            FIELD_ID: self.point_id,
            FIELD_TEMPERATURE: self.temperature,
            FIELD_ALERT: self.alert,
            FIELD_OWNER: self.owner,
        })
        return document

    def to_bytes(self) -> bytes:
        """Canonical serialized form handed to the backend."""
        return canonical_bytes(self.to_dict())

    @staticmethod
    def from_dict(data: Any) -> DataPoint:
        """Build a DataPoint from a decoded document; raises RecordDecodeError."""
        if not isinstance(data, dict):
            raise RecordDecodeError(
                f"Stored value is not a data point document: {data!r}"
            )
        try:
            point_id = data[FIELD_ID]
            temperature = data[FIELD_TEMPERATURE]
        except KeyError as e:
            raise RecordDecodeError(
                f"Stored data point is missing field {e.args[0]}"
            ) from e

        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            raise RecordDecodeError(
                f"Stored data point {point_id} has a non-numeric temperature"
            )

        return DataPoint(
            point_id=point_id,
            temperature=temperature,
            alert=data.get(FIELD_ALERT) or "",
            owner=data.get(FIELD_OWNER, ""),
            doc_type=data.get(FIELD_DOC_TYPE, DOC_TYPE_DATA_POINT),
            extras=tuple(
                (key, value) for key, value in sorted(data.items())
                if key not in KNOWN_FIELDS
            ),
        )

    @staticmethod
    def from_bytes(raw: bytes) -> DataPoint:
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise RecordDecodeError(f"Stored value is not valid JSON: {e}") from e
        return DataPoint.from_dict(data)
