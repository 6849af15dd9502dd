"""
Transaction Router
==================

Named-transaction entry point for hosts that only speak strings
(a ledger peer, the CLI). Maps transaction names to contract methods,
converts string arguments by declared parameter type, and renders
results back to strings.

SUBMIT vs EVALUATE:
===================
Transactions flagged read_only never write to the backend; a host may
run them without ordering or endorsement.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json

from .contracts.base import InvalidArgumentError
from .core.contract import EnvironmentalDataContract, TransactionContext


@dataclass(frozen=True)
class TransactionSpec:
    """Immutable description of one named transaction."""
    name: str
    method_name: str
    parameters: Tuple[Tuple[str, str], ...] = ()  # (name, "string" | "number")
    read_only: bool = False
    returns: Optional[str] = None


TRANSACTIONS: Tuple[TransactionSpec, ...] = (
    TransactionSpec("InitLedger", "init_ledger"),
    TransactionSpec(
        "AddDataPoint", "add_data_point",
        (("id", "string"), ("temperature", "number"), ("owner", "string"))
    ),
    TransactionSpec("ReadDataPoint", "read_data_point", (("id", "string"),), read_only=True, returns="string"),
    TransactionSpec(
        "UpdateDataPoint", "update_data_point",
        (("id", "string"), ("temperature", "number"))
    ),
    TransactionSpec("DeleteDataPoint", "delete_data_point", (("id", "string"),)),
    TransactionSpec(
        "TransferDataPoint", "transfer_data_point",
        (("id", "string"), ("newOwner", "string"))
    ),
    TransactionSpec("GetAllDataPoints", "get_all_data_points", read_only=True, returns="string"),
    TransactionSpec("DataPointExists", "data_point_exists", (("id", "string"),), read_only=True, returns="boolean"),
    TransactionSpec("ConsensusOnThresholdCrossed", "consensus_on_threshold_crossed", (("id", "string"),)),
)


def _reject_constant(token: str):
    raise ValueError(f"{token} is not a number")


def parse_number(name: str, value: Any):
    """Convert a string argument declared as a number."""
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value, parse_constant=_reject_constant)
    except ValueError:
        raise InvalidArgumentError(
            f"Argument {name} must be a number, got {value!r}", argument=name
        )
    if isinstance(parsed, bool) or not isinstance(parsed, (int, float)):
        raise InvalidArgumentError(
            f"Argument {name} must be a number, got {value!r}", argument=name
        )
    return parsed


def render_result(result: Any) -> str:
    if result is None:
        return ""
    if isinstance(result, bool):
        return "true" if result else "false"
    return str(result)


class TransactionRouter:
    """Dispatches named transactions onto an EnvironmentalDataContract."""

    def __init__(self, contract: Optional[EnvironmentalDataContract] = None):
        self._contract = contract or EnvironmentalDataContract()
        self._transactions: Dict[str, TransactionSpec] = {t.name: t for t in TRANSACTIONS}

    @property
    def contract(self) -> EnvironmentalDataContract:
        return self._contract

    def get_transaction(self, name: str) -> TransactionSpec:
        spec = self._transactions.get(name)
        if spec is None:
            raise InvalidArgumentError(
                f"Transaction {name} is not defined on {self._contract.title}",
                transaction=name
            )
        return spec

    def describe(self) -> Dict[str, Any]:
        """Contract metadata: info block plus every transaction signature."""
        return {
            "info": {
                "title": self._contract.title,
                "description": self._contract.description,
            },
            "transactions": [
                {
                    "name": t.name,
                    "parameters": [{"name": p, "type": kind} for p, kind in t.parameters],
                    "readOnly": t.read_only,
                    "returns": t.returns,
                }
                for t in TRANSACTIONS
            ],
        }

    def convert_arguments(self, spec: TransactionSpec, args: Sequence[Any]) -> List[Any]:
        if len(args) != len(spec.parameters):
            raise InvalidArgumentError(
                f"Expected {len(spec.parameters)} argument(s) for {spec.name}, got {len(args)}",
                transaction=spec.name
            )
        converted = []
        for (name, kind), value in zip(spec.parameters, args):
            converted.append(parse_number(name, value) if kind == "number" else value)
        return converted

    def invoke(self, ctx: TransactionContext, name: str, args: Sequence[Any] = ()) -> str:
        spec = self.get_transaction(name)
        converted = self.convert_arguments(spec, args)
        method = getattr(self._contract, spec.method_name)
        return render_result(method(ctx, *converted))
