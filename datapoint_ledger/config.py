"""
Ledger Configuration

Dataclass configs with safe defaults. Environment variables only
override what they name; everything else keeps its default.

ENVIRONMENT:
============
ENVLEDGER_BACKEND        memory | sqlite
ENVLEDGER_DB_PATH        path of the SQLite world state file
ENVLEDGER_PAGE_SIZE      rows fetched per range-scan page
ENVLEDGER_AUTHORIZED_MSP organization allowed to run the consensus recheck
ENVLEDGER_AUDIT_MAX     audit entries kept in memory per contract instance
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os

from .contracts.base import (
    TEMPERATURE_THRESHOLD, MIN_TEMPERATURE, MAX_TEMPERATURE,
    AUTHORIZED_CONSENSUS_MSP
)
from .storage import StorageConfig


@dataclass
class LedgerConfig:
    """Unified configuration for the ledger service."""
    temperature_threshold: float = TEMPERATURE_THRESHOLD
    min_temperature: float = MIN_TEMPERATURE
    max_temperature: float = MAX_TEMPERATURE
    authorized_msp_id: str = AUTHORIZED_CONSENSUS_MSP
    audit_max_entries: int = 10000
    storage: StorageConfig = None

    def __post_init__(self):
        self.storage = self.storage or StorageConfig()
        if self.min_temperature > self.max_temperature:
            raise ValueError("min_temperature must not exceed max_temperature")

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> LedgerConfig:
        env = os.environ if environ is None else environ

        storage = StorageConfig()
        if env.get("ENVLEDGER_BACKEND"):
            storage.backend_type = env["ENVLEDGER_BACKEND"]
        if env.get("ENVLEDGER_DB_PATH"):
            storage.db_path = env["ENVLEDGER_DB_PATH"]
            if not env.get("ENVLEDGER_BACKEND"):
                storage.backend_type = "sqlite"
        if env.get("ENVLEDGER_PAGE_SIZE"):
            storage.scan_page_size = int(env["ENVLEDGER_PAGE_SIZE"])

        config = LedgerConfig(storage=storage)
        if env.get("ENVLEDGER_AUTHORIZED_MSP"):
            config.authorized_msp_id = env["ENVLEDGER_AUTHORIZED_MSP"]
        if env.get("ENVLEDGER_AUDIT_MAX"):
            config.audit_max_entries = int(env["ENVLEDGER_AUDIT_MAX"])
        return config
