"""
Environmental Data Ledger

Record store for environmental sensor readings ("data points") owned by
organizations, with threshold alerting. The layers communicate only
through the contracts package; storage and caller identity are injected.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - DataPoint record, ErrorCode / Error, typed exceptions, audit events
   - Deterministic wire format for records

2. STORAGE (storage/)
   - Responsibility: key-value world state with ordered range scans
   - Implementations: in-memory, SQLite
   - MUST NOT: interpret stored values

3. IDENTITY (identity/)
   - Responsibility: report the caller's organization
   - MUST NOT: make authorization decisions

4. CORE (core/)
   - Responsibility: validation, alerts, record lifecycle
   - Allowed inputs: TransactionContext + arguments
   - MUST NOT: know which backend or identity source is in use

5. OBSERVABILITY (observability/)
   - Responsibility: append-only audit trail of every transaction

6. ROUTER / CLI (router.py, cli.py)
   - Named transactions with string arguments for outer hosts

CONSTRAINTS ENFORCED:
=====================
- Validation precedes every write
- Deterministic serialization: identical records → identical bytes
- Alerts are never cleared once set
- Explicit errors: every failure is a typed LedgerError
"""

from .config import LedgerConfig
from .contracts import (
    DataPoint,
    ErrorCode,
    LedgerError,
    InvalidArgumentError,
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
    RecordDecodeError,
)
from .core import EnvironmentalDataContract, TransactionContext
from .identity import CallerIdentity, StaticCallerIdentity
from .router import TransactionRouter
from .storage import (
    KeyValueBackend,
    InMemoryKeyValueBackend,
    SqliteKeyValueBackend,
    StorageConfig,
    create_backend,
)

__version__ = "0.1.0"

__all__ = [
    'LedgerConfig',
    'DataPoint',
    'ErrorCode',
    'LedgerError',
    'InvalidArgumentError',
    'AlreadyExistsError',
    'NotFoundError',
    'PermissionDeniedError',
    'RecordDecodeError',
    'EnvironmentalDataContract',
    'TransactionContext',
    'CallerIdentity',
    'StaticCallerIdentity',
    'TransactionRouter',
    'KeyValueBackend',
    'InMemoryKeyValueBackend',
    'SqliteKeyValueBackend',
    'StorageConfig',
    'create_backend',
]
