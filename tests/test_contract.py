"""
Record Lifecycle Tests
======================

Add / read / update / delete / transfer / existence / seeding against an
in-memory world state.
"""

import json

import pytest

from datapoint_ledger.contracts.base import (
    AlreadyExistsError, ErrorCode, InvalidArgumentError, NotFoundError, RecordDecodeError
)
from datapoint_ledger.contracts.events import AuditEventType
from datapoint_ledger.config import LedgerConfig
from datapoint_ledger.core.contract import SEED_DATA_POINTS, EnvironmentalDataContract
from datapoint_ledger.observability import AuditLog

ALERT_X_25 = (
    "Temperature alert! Data point x has a temperature of 25°C, "
    "exceeding the threshold of 20°C."
)


def read(contract, ctx, point_id):
    return json.loads(contract.read_data_point(ctx, point_id))


class TestInitLedger:
    """Seeding writes five fixed records with empty alerts."""

    def test_seeds_five_records(self, contract, ctx, backend):
        contract.init_ledger(ctx)
        assert sorted(backend.inner.keys()) == ["data1", "data2", "data3", "data4", "data5"]

    def test_seed_values(self, contract, ctx):
        contract.init_ledger(ctx)
        temperatures = [read(contract, ctx, f"data{i}")["Temperature"] for i in range(1, 6)]
        assert temperatures == [20, 25, 18, 22, 24]
        for i in range(1, 6):
            record = read(contract, ctx, f"data{i}")
            assert record["Owner"] == "Org1"
            assert record["docType"] == "dataPoint"

    def test_seed_alerts_empty_even_above_threshold(self, contract, ctx):
        contract.init_ledger(ctx)
        assert read(contract, ctx, "data2")["Alert"] == ""
        assert read(contract, ctx, "data4")["Alert"] == ""

    def test_rerun_overwrites_seed_keys_only(self, contract, ctx):
        contract.init_ledger(ctx)
        contract.update_data_point(ctx, "data1", 30)
        contract.add_data_point(ctx, "extra", 10, "Org3")

        contract.init_ledger(ctx)

        assert read(contract, ctx, "data1")["Temperature"] == 20
        assert read(contract, ctx, "data1")["Alert"] == ""
        assert contract.data_point_exists(ctx, "extra")

    def test_seed_bytes_are_canonical(self, contract, ctx, backend):
        contract.init_ledger(ctx)
        assert backend.inner.get("data1") == (
            b'{"Alert":"","ID":"data1","Owner":"Org1","Temperature":20,"docType":"dataPoint"}'
        )
        assert len(SEED_DATA_POINTS) == 5


class TestAddDataPoint:
    """Creating records."""

    def test_add_over_threshold_sets_alert(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        record = read(contract, ctx, "x")
        assert record == {
            "Alert": ALERT_X_25,
            "ID": "x",
            "Owner": "Org1",
            "Temperature": 25,
            "docType": "dataPoint",
        }

    def test_add_below_threshold_has_empty_alert(self, contract, ctx):
        contract.add_data_point(ctx, "y", 15, "Org1")
        assert read(contract, ctx, "y")["Alert"] == ""

    def test_threshold_itself_is_not_an_alert(self, contract, ctx):
        contract.add_data_point(ctx, "edge", 20, "Org1")
        assert read(contract, ctx, "edge")["Alert"] == ""

    def test_fractional_temperature_in_message(self, contract, ctx):
        contract.add_data_point(ctx, "f", 20.5, "Org1")
        record = read(contract, ctx, "f")
        assert record["Temperature"] == 20.5
        assert "temperature of 20.5°C" in record["Alert"]

    def test_integral_float_stored_as_integer(self, contract, ctx, backend):
        contract.add_data_point(ctx, "i", 25.0, "Org1")
        assert b'"Temperature":25,' in backend.inner.get("i")
        assert "temperature of 25°C" in read(contract, ctx, "i")["Alert"]

    def test_duplicate_fails_and_keeps_original(self, contract, ctx, backend):
        contract.add_data_point(ctx, "x", 25, "Org1")
        before = backend.inner.get("x")

        with pytest.raises(AlreadyExistsError) as exc_info:
            contract.add_data_point(ctx, "x", 10, "Org2")

        assert exc_info.value.error.code == ErrorCode.ALREADY_EXISTS
        assert str(exc_info.value) == "The data point x already exists"
        assert backend.inner.get("x") == before

    @pytest.mark.parametrize("bad_id", ["", None, 5, b"x"])
    def test_invalid_id_rejected_before_backend_access(self, contract, ctx, backend, bad_id):
        with pytest.raises(InvalidArgumentError):
            contract.add_data_point(ctx, bad_id, 25, "Org1")
        assert backend.gets == []
        assert backend.puts == []

    @pytest.mark.parametrize("bad_temperature", [-50.01, 150.5, 1000, "25", None, True, float("nan")])
    def test_invalid_temperature_rejected(self, contract, ctx, backend, bad_temperature):
        with pytest.raises(InvalidArgumentError) as exc_info:
            contract.add_data_point(ctx, "x", bad_temperature, "Org1")
        assert "between -50 and 150" in str(exc_info.value)
        assert backend.gets == []
        assert backend.puts == []

    @pytest.mark.parametrize("temperature", [-50, 150, 0, -49.5])
    def test_boundaries_accepted(self, contract, ctx, temperature):
        contract.add_data_point(ctx, "b", temperature, "Org1")
        assert read(contract, ctx, "b")["Temperature"] == temperature

    def test_one_read_one_write(self, contract, ctx, backend):
        contract.add_data_point(ctx, "x", 25, "Org1")
        assert backend.gets == ["x"]
        assert [k for k, _ in backend.puts] == ["x"]


class TestReadDataPoint:
    """Reading records."""

    def test_returns_stored_string_verbatim(self, contract, ctx, backend):
        contract.add_data_point(ctx, "x", 25, "Org1")
        assert contract.read_data_point(ctx, "x") == backend.inner.get("x").decode("utf-8")

    def test_missing_raises_not_found(self, contract, ctx):
        with pytest.raises(NotFoundError) as exc_info:
            contract.read_data_point(ctx, "ghost")
        assert str(exc_info.value) == "The data point ghost does not exist"

    def test_empty_value_counts_as_missing(self, contract, ctx, backend):
        backend.inner.put("blank", b"")
        with pytest.raises(NotFoundError):
            contract.read_data_point(ctx, "blank")

    def test_read_does_not_write(self, contract, ctx, backend):
        contract.add_data_point(ctx, "x", 25, "Org1")
        backend.reset()
        contract.read_data_point(ctx, "x")
        assert backend.puts == []


class TestUpdateDataPoint:
    """Temperature updates and the alert rule."""

    def test_update_sets_alert_when_crossing(self, contract, ctx):
        contract.add_data_point(ctx, "x", 15, "Org1")
        contract.update_data_point(ctx, "x", 25)
        record = read(contract, ctx, "x")
        assert record["Temperature"] == 25
        assert record["Alert"] == ALERT_X_25

    def test_drop_below_threshold_keeps_alert(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        contract.update_data_point(ctx, "x", 5)
        record = read(contract, ctx, "x")
        assert record["Temperature"] == 5
        assert record["Alert"] == ALERT_X_25

    def test_second_crossing_does_not_refresh_message(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        contract.update_data_point(ctx, "x", 40)
        assert read(contract, ctx, "x")["Alert"] == ALERT_X_25

    def test_below_threshold_update_keeps_empty_alert(self, contract, ctx):
        contract.add_data_point(ctx, "x", 10, "Org1")
        contract.update_data_point(ctx, "x", 20)
        assert read(contract, ctx, "x")["Alert"] == ""

    def test_owner_untouched(self, contract, ctx):
        contract.add_data_point(ctx, "x", 10, "Org7")
        contract.update_data_point(ctx, "x", 12)
        assert read(contract, ctx, "x")["Owner"] == "Org7"

    def test_missing_raises_not_found(self, contract, ctx, backend):
        with pytest.raises(NotFoundError):
            contract.update_data_point(ctx, "ghost", 10)
        assert backend.puts == []

    def test_invalid_temperature_leaves_record(self, contract, ctx, backend):
        contract.add_data_point(ctx, "x", 10, "Org1")
        before = backend.inner.get("x")
        with pytest.raises(InvalidArgumentError):
            contract.update_data_point(ctx, "x", 151)
        assert backend.inner.get("x") == before

    def test_corrupted_record_aborts_update(self, contract, ctx, backend):
        backend.inner.put("bad", b"not json")
        with pytest.raises(RecordDecodeError) as exc_info:
            contract.update_data_point(ctx, "bad", 10)
        assert exc_info.value.error.code == ErrorCode.DECODE_FAILURE
        assert backend.inner.get("bad") == b"not json"


class TestDeleteDataPoint:
    """Deleting records."""

    def test_delete_removes_key(self, contract, ctx):
        contract.add_data_point(ctx, "x", 10, "Org1")
        contract.delete_data_point(ctx, "x")
        assert not contract.data_point_exists(ctx, "x")

    def test_delete_missing_raises_not_found(self, contract, ctx, backend):
        with pytest.raises(NotFoundError):
            contract.delete_data_point(ctx, "ghost")
        assert backend.deletes == []

    def test_id_can_be_reused_after_delete(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        contract.delete_data_point(ctx, "x")
        contract.add_data_point(ctx, "x", 10, "Org2")
        assert read(contract, ctx, "x")["Alert"] == ""

    def test_invalid_id(self, contract, ctx):
        with pytest.raises(InvalidArgumentError):
            contract.delete_data_point(ctx, "")


class TestTransferDataPoint:
    """Ownership transfer."""

    def test_only_owner_changes(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        contract.transfer_data_point(ctx, "x", "Org3")
        record = read(contract, ctx, "x")
        assert record["Owner"] == "Org3"
        assert record["Temperature"] == 25
        assert record["Alert"] == ALERT_X_25

    def test_new_owner_is_not_validated(self, contract, ctx):
        contract.add_data_point(ctx, "x", 10, "Org1")
        contract.transfer_data_point(ctx, "x", "")
        assert read(contract, ctx, "x")["Owner"] == ""

    def test_missing_raises_not_found(self, contract, ctx):
        with pytest.raises(NotFoundError):
            contract.transfer_data_point(ctx, "ghost", "Org3")

    def test_invalid_id(self, contract, ctx):
        with pytest.raises(InvalidArgumentError):
            contract.transfer_data_point(ctx, None, "Org3")

    def test_writes_to_requested_key_when_stored_id_differs(self, contract, ctx, backend):
        backend.inner.put("k", b'{"Alert":"","ID":"other","Owner":"Org1","Temperature":10,"docType":"dataPoint"}')
        backend.reset()

        contract.transfer_data_point(ctx, "k", "Org3")

        assert [key for key, _ in backend.puts] == ["k"]
        assert backend.inner.get("other") is None
        record = read(contract, ctx, "k")
        assert record["Owner"] == "Org3"
        assert record["ID"] == "other"

    def test_unknown_fields_survive_rewrite(self, contract, ctx, backend):
        backend.inner.put(
            "k",
            b'{"Alert":"","ID":"k","Location":"lab","Owner":"Org1","Temperature":10,"docType":"dataPoint"}'
        )
        contract.transfer_data_point(ctx, "k", "Org3")
        assert backend.inner.get("k") == (
            b'{"Alert":"","ID":"k","Location":"lab","Owner":"Org3","Temperature":10,"docType":"dataPoint"}'
        )


class TestDataPointExists:
    """Existence query."""

    def test_true_for_present(self, contract, ctx):
        contract.add_data_point(ctx, "x", 10, "Org1")
        assert contract.data_point_exists(ctx, "x") is True

    def test_false_for_absent(self, contract, ctx):
        assert contract.data_point_exists(ctx, "x") is False

    def test_false_for_empty_value(self, contract, ctx, backend):
        backend.inner.put("x", b"")
        assert contract.data_point_exists(ctx, "x") is False

    def test_no_validation_on_empty_id(self, contract, ctx):
        assert contract.data_point_exists(ctx, "") is False


class TestAuditTrail:
    """Every transaction leaves an audit entry."""

    def test_state_changes_recorded(self, contract, ctx):
        contract.add_data_point(ctx, "x", 25, "Org1")
        contract.transfer_data_point(ctx, "x", "Org3")
        actions = [e.action for e in contract.get_audit_log(entity_id="x")]
        assert actions == ["added", "transferred"]

    def test_failures_recorded_as_errors(self, contract, ctx):
        with pytest.raises(NotFoundError):
            contract.read_data_point(ctx, "ghost")
        errors = contract.get_audit_log(event_type=AuditEventType.ERROR)
        assert len(errors) == 1
        assert errors[0].entity_id == "ghost"
        assert errors[0].metadata_value("error_code") == "NOT_FOUND"

    def test_log_keeps_only_newest_entries(self, ctx):
        contract = EnvironmentalDataContract(LedgerConfig(audit_max_entries=3))
        for point_id in ["a", "b", "c", "d", "e"]:
            contract.add_data_point(ctx, point_id, 10, "Org1")
        assert [e.entity_id for e in contract.get_audit_log()] == ["c", "d", "e"]


class TestAuditLogCapacity:
    """The collector is bounded."""

    def test_oldest_evicted_first(self):
        log = AuditLog(max_entries=2)
        for action in ["one", "two", "three"]:
            log.record(AuditEventType.QUERY, action)
        assert log.entry_count == 2
        assert [e.action for e in log.get_entries()] == ["two", "three"]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            AuditLog(max_entries=0)
