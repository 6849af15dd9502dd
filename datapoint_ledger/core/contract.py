"""
Environmental Data Contract
===========================

Record lifecycle for environmental data points: create, read, update,
delete, transfer ownership, enumerate, and the consensus-gated alert
recheck.

FLOW OF EVERY TRANSACTION:
==========================
1. Validate arguments (no backend access yet)
2. Read existing state if needed
3. Compute the new record
4. Write the full record back through the backend

GUARANTEES:
===========
- Validation always precedes any write; a failing call leaves no trace in
  the world state
- Records are serialized deterministically (sorted keys, compact JSON)
- An alert, once set, is never cleared by any transaction here
- No retries: backend failures propagate to the caller unchanged
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
import json
import logging

from ..config import LedgerConfig
from ..contracts.base import (
    LedgerError, AlreadyExistsError, NotFoundError, PermissionDeniedError
)
from ..contracts.events import AuditEventType, AuditLogEntry
from ..contracts.records import DataPoint
from ..domain.serialization import format_number, pretty_json
from ..identity import CallerIdentity
from ..observability import AuditLog
from ..storage import KeyValueBackend
from .alerts import (
    alert_for_new_reading, alert_after_update, exceeds_threshold,
    threshold_alert_message
)
from .validation import validate_id, validate_temperature

logger = logging.getLogger(__name__)


# =============================================================================
# TRANSACTION CONTEXT
# =============================================================================

@dataclass(frozen=True)
class TransactionContext:
    """
    Everything a transaction may touch: the world state and the caller.

    Built per invocation by whatever hosts the contract.
    """
    stub: KeyValueBackend
    client_identity: CallerIdentity


# Seed data written by init_ledger. Alerts are deliberately left empty even
# for readings above the threshold.
SEED_DATA_POINTS: Tuple[DataPoint, ...] = (
    DataPoint(point_id="data1", temperature=20, alert="", owner="Org1"),
    DataPoint(point_id="data2", temperature=25, alert="", owner="Org1"),
    DataPoint(point_id="data3", temperature=18, alert="", owner="Org1"),
    DataPoint(point_id="data4", temperature=22, alert="", owner="Org1"),
    DataPoint(point_id="data5", temperature=24, alert="", owner="Org1"),
)


class EnvironmentalDataContract:
    """
    Smart contract for tracking environmental data points.

    Stateless apart from its configuration and audit trail: all record
    state lives in the backend carried by the TransactionContext.
    """

    title = "EnvironmentalDataContract"
    description = "Smart contract for tracking environmental data points"

    def __init__(self, config: Optional[LedgerConfig] = None):
        self._config = config or LedgerConfig()
        self._audit = AuditLog(
            layer_name="contract", max_entries=self._config.audit_max_entries
        )

    @property
    def config(self) -> LedgerConfig:
        return self._config

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _validate_temperature(self, temperature: Any):
        return validate_temperature(
            temperature,
            self._config.min_temperature,
            self._config.max_temperature
        )

    def _put(self, ctx: TransactionContext, point_id: str, data_point: DataPoint) -> None:
        # Always the requested key, even if the stored ID field says otherwise
        ctx.stub.put(point_id, data_point.to_bytes())

    def _load(self, ctx: TransactionContext, point_id: str) -> DataPoint:
        raw = ctx.stub.get(point_id)
        if not raw:
            raise NotFoundError(f"The data point {point_id} does not exist", point_id=point_id)
        return DataPoint.from_bytes(raw)

    def _record_failure(self, action: str, point_id: Optional[str], error: LedgerError):
        self._audit.record(
            AuditEventType.ERROR,
            action,
            entity_id=point_id if isinstance(point_id, str) else None,
            metadata=(("error_code", error.error.code.name), ("message", error.message))
        )

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def init_ledger(self, ctx: TransactionContext) -> None:
        """Seed the world state with the five default data points."""
        for data_point in SEED_DATA_POINTS:
            self._put(ctx, data_point.point_id, data_point)
            logger.info(
                "DataPoint %s initialized with temperature %s",
                data_point.point_id, format_number(data_point.temperature)
            )
            self._audit.record(AuditEventType.STATE_CHANGE, "initialized", data_point.point_id)
        logger.info("Ledger initialized with default data points.")

    def add_data_point(self, ctx: TransactionContext, point_id: str, temperature, owner: str) -> None:
        try:
            validate_id(point_id)
            self._validate_temperature(temperature)

            if self.data_point_exists(ctx, point_id):
                raise AlreadyExistsError(
                    f"The data point {point_id} already exists", point_id=point_id
                )
        except LedgerError as e:
            self._record_failure("add", point_id, e)
            raise

        alert = alert_for_new_reading(point_id, temperature, self._config.temperature_threshold)
        data_point = DataPoint(point_id=point_id, temperature=temperature, alert=alert, owner=owner)
        self._put(ctx, point_id, data_point)

        logger.info("Added DataPoint: %s with alert: %s", point_id, alert)
        self._audit.record(
            AuditEventType.STATE_CHANGE, "added", point_id,
            metadata=(("owner", str(owner)), ("alert_set", str(bool(alert)).lower()))
        )

    def read_data_point(self, ctx: TransactionContext, point_id: str) -> str:
        """Return the stored canonical JSON of one data point."""
        try:
            validate_id(point_id)
            raw = ctx.stub.get(point_id)
            if not raw:
                raise NotFoundError(f"The data point {point_id} does not exist", point_id=point_id)
        except LedgerError as e:
            self._record_failure("read", point_id, e)
            raise

        logger.info("Read DataPoint: %s", point_id)
        self._audit.record(AuditEventType.QUERY, "read", point_id)
        return raw.decode("utf-8", errors="replace")

    def update_data_point(self, ctx: TransactionContext, point_id: str, temperature) -> None:
        try:
            validate_id(point_id)
            self._validate_temperature(temperature)
            current = self._load(ctx, point_id)
        except LedgerError as e:
            self._record_failure("update", point_id, e)
            raise

        alert = alert_after_update(
            point_id, current.alert, temperature, self._config.temperature_threshold
        )
        self._put(ctx, point_id, current.with_temperature(temperature, alert))

        logger.info("Updated DataPoint: %s with alert: %s", point_id, alert)
        self._audit.record(
            AuditEventType.STATE_CHANGE, "updated", point_id,
            metadata=(("temperature", format_number(temperature)),)
        )

    def delete_data_point(self, ctx: TransactionContext, point_id: str) -> None:
        try:
            validate_id(point_id)
            if not self.data_point_exists(ctx, point_id):
                raise NotFoundError(f"The data point {point_id} does not exist", point_id=point_id)
        except LedgerError as e:
            self._record_failure("delete", point_id, e)
            raise

        ctx.stub.delete(point_id)
        logger.info("Deleted DataPoint: %s", point_id)
        self._audit.record(AuditEventType.STATE_CHANGE, "deleted", point_id)

    def transfer_data_point(self, ctx: TransactionContext, point_id: str, new_owner: str) -> None:
        """Change the owning organization. new_owner is taken as given."""
        try:
            validate_id(point_id)
            current = self._load(ctx, point_id)
        except LedgerError as e:
            self._record_failure("transfer", point_id, e)
            raise

        self._put(ctx, point_id, current.with_owner(new_owner))
        logger.info("Transferred DataPoint %s to %s", point_id, new_owner)
        self._audit.record(
            AuditEventType.STATE_CHANGE, "transferred", point_id,
            metadata=(("previous_owner", current.owner), ("new_owner", str(new_owner)))
        )

    def get_all_data_points(self, ctx: TransactionContext) -> str:
        """
        Enumerate the whole world state as a pretty-printed JSON array.

        Entries that do not parse as JSON are included as their raw string
        instead of failing the enumeration.
        """
        all_results: List[Any] = []
        fallback_count = 0
        for key, value in ctx.stub.scan("", ""):
            str_value = value.decode("utf-8", errors="replace")
            try:
                record = json.loads(str_value)
            except ValueError as e:
                logger.warning("Entry %s is not valid JSON, returning raw value: %s", key, e)
                self._audit.record(
                    AuditEventType.ERROR, "decode_fallback", key,
                    metadata=(("error_code", "DECODE_FAILURE"),)
                )
                fallback_count += 1
                record = str_value
            all_results.append(record)

        logger.info("Retrieved all data points.")
        self._audit.record(
            AuditEventType.QUERY, "enumerated",
            metadata=(("count", str(len(all_results))), ("fallbacks", str(fallback_count)))
        )
        return pretty_json(all_results)

    def data_point_exists(self, ctx: TransactionContext, point_id: str) -> bool:
        raw = ctx.stub.get(point_id)
        return raw is not None and len(raw) > 0

    def consensus_on_threshold_crossed(self, ctx: TransactionContext, point_id: str) -> None:
        """
        Re-derive the alert of one data point from its stored temperature.

        Only the authorized organization may run this. The record is
        rewritten only when the canonical message differs from the stored
        alert.
        """
        try:
            msp_id = ctx.client_identity.get_msp_id()
            if msp_id != self._config.authorized_msp_id:
                raise PermissionDeniedError(
                    "Only Org2 can perform consensus check.", msp_id=msp_id
                )
            current = self._load(ctx, point_id)
        except LedgerError as e:
            self._record_failure("consensus", point_id, e)
            raise

        logger.info(
            "Consensus check on DataPoint %s with temperature %s°C.",
            point_id, format_number(current.temperature)
        )

        threshold = self._config.temperature_threshold
        if not exceeds_threshold(current.temperature, threshold):
            logger.info("Consensus on DataPoint %s: Temperature is within safe range.", point_id)
            self._audit.record(AuditEventType.QUERY, "consensus_within_range", point_id)
            return

        new_alert = threshold_alert_message(point_id, current.temperature, threshold)
        if current.alert == new_alert:
            logger.info("Consensus on DataPoint %s: No update needed, alert already set.", point_id)
            self._audit.record(AuditEventType.QUERY, "consensus_unchanged", point_id)
            return

        self._put(ctx, point_id, current.with_alert(new_alert))
        logger.info("Consensus on DataPoint %s: Alert updated to: %s", point_id, new_alert)
        self._audit.record(AuditEventType.STATE_CHANGE, "consensus_alert_updated", point_id)

    # =========================================================================
    # AUDIT ACCESS
    # =========================================================================

    def get_audit_log(
        self,
        event_type: Optional[AuditEventType] = None,
        entity_id: Optional[str] = None
    ) -> List[AuditLogEntry]:
        return self._audit.get_entries(event_type=event_type, entity_id=entity_id)
