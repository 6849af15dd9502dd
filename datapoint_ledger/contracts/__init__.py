"""
Contracts Module

This module defines the explicit data types shared by every layer of
the ledger: the DataPoint record, error codes and exceptions, and the
audit events the service emits.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Every failure maps to one explicit ErrorCode
3. Serialized records are byte-for-byte deterministic
4. All timestamps use UTC and are never mutated
"""

from .base import (
    DOC_TYPE_DATA_POINT,
    TEMPERATURE_THRESHOLD,
    MIN_TEMPERATURE,
    MAX_TEMPERATURE,
    AUTHORIZED_CONSENSUS_MSP,
    ErrorCode,
    Error,
    LedgerError,
    InvalidArgumentError,
    AlreadyExistsError,
    NotFoundError,
    PermissionDeniedError,
    RecordDecodeError,
)
from .events import AuditEventType, AuditLogEntry
from .records import DataPoint

__all__ = [
    'DOC_TYPE_DATA_POINT',
    'TEMPERATURE_THRESHOLD',
    'MIN_TEMPERATURE',
    'MAX_TEMPERATURE',
    'AUTHORIZED_CONSENSUS_MSP',
    'ErrorCode',
    'Error',
    'LedgerError',
    'InvalidArgumentError',
    'AlreadyExistsError',
    'NotFoundError',
    'PermissionDeniedError',
    'RecordDecodeError',
    'AuditEventType',
    'AuditLogEntry',
    'DataPoint',
]
