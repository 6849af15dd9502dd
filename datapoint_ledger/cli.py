"""
Ledger Command-Line Tool
========================

Invoke named transactions against a local world state.

COMMANDS:
- invoke:   Run one transaction (e.g. AddDataPoint data9 31 Org1)
- describe: Print contract metadata

USAGE:
    python -m datapoint_ledger --db-path ./data/world_state.db invoke InitLedger
    python -m datapoint_ledger --msp-id Org2MSP invoke ConsensusOnThresholdCrossed data2
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .config import LedgerConfig
from .contracts.base import LedgerError
from .core.contract import EnvironmentalDataContract, TransactionContext
from .identity import StaticCallerIdentity
from .router import TransactionRouter
from .storage import create_backend

DEFAULT_MSP_ID = "Org1MSP"
DEFAULT_DB_PATH = os.path.join("data", "world_state.db")


def configure_logging(verbose: bool, log_file: Optional[str]):
    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
        )


def build_config(args) -> LedgerConfig:
    config = LedgerConfig.from_env()
    config.storage.backend_type = args.backend or os.environ.get("ENVLEDGER_BACKEND") or "sqlite"
    config.storage.db_path = args.db_path or config.storage.db_path or DEFAULT_DB_PATH
    return config


def cmd_invoke(args) -> int:
    config = build_config(args)
    router = TransactionRouter(EnvironmentalDataContract(config))
    ctx = TransactionContext(
        stub=create_backend(config.storage),
        client_identity=StaticCallerIdentity(args.msp_id),
    )
    try:
        output = router.invoke(ctx, args.name, args.args)
    except LedgerError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    if output:
        print(output)
    return 0


def cmd_describe(args) -> int:
    print(json.dumps(TransactionRouter().describe(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envledger",
        description="Environmental data point ledger"
    )
    parser.add_argument("--db-path", default=None, help=f"SQLite world state file (default: {DEFAULT_DB_PATH})")
    parser.add_argument("--backend", choices=("memory", "sqlite"), default=None, help="World state backend")
    parser.add_argument("--msp-id", default=DEFAULT_MSP_ID, help="Organization of the caller")
    parser.add_argument("--verbose", action="store_true", help="Log to stderr at debug level")
    parser.add_argument("--log-file", default=None, help="Append logs to this file")

    subparsers = parser.add_subparsers(dest="command")

    invoke_parser = subparsers.add_parser("invoke", help="Run a transaction")
    invoke_parser.add_argument("name", help="Transaction name, e.g. ReadDataPoint")
    invoke_parser.add_argument("args", nargs="*", help="Transaction arguments")

    subparsers.add_parser("describe", help="Show contract metadata")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.log_file)

    if args.command == "invoke":
        return cmd_invoke(args)
    elif args.command == "describe":
        return cmd_describe(args)
    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
