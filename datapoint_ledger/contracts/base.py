"""
Base Contracts and Shared Types

These are the foundational types used across the ledger.
Error types here are IMMUTABLE data; the exceptions wrap them so the
failing operation aborts while the error itself can still be stored.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types and constants but MUST NOT modify them
- The threshold constants are the single source for every alert check
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple
from enum import Enum, auto


# =============================================================================
# DOMAIN CONSTANTS
# =============================================================================

DOC_TYPE_DATA_POINT = "dataPoint"

TEMPERATURE_THRESHOLD = 20  # Celsius
MIN_TEMPERATURE = -50
MAX_TEMPERATURE = 150

AUTHORIZED_CONSENSUS_MSP = "Org2MSP"


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for ledger operations.
    Every failure a transaction can surface is enumerated here.
    """
    INVALID_ARGUMENT = auto()
    ALREADY_EXISTS = auto()
    NOT_FOUND = auto()
    PERMISSION_DENIED = auto()
    DECODE_FAILURE = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data - they can be stored in the audit trail and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


# =============================================================================
# EXCEPTIONS (Abort the transaction, carry the Error)
# =============================================================================

class LedgerError(Exception):
    """Base class for every failure raised by a ledger transaction."""

    code: ErrorCode = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, **context: str):
        super().__init__(message)
        self.error = Error(
            code=self.code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in sorted(context.items()))
        )

    @property
    def message(self) -> str:
        return self.error.message


class InvalidArgumentError(LedgerError):
    """Raised when an id or temperature argument is malformed."""
    code = ErrorCode.INVALID_ARGUMENT


class AlreadyExistsError(LedgerError):
    """Raised when adding a data point whose id is already present."""
    code = ErrorCode.ALREADY_EXISTS


class NotFoundError(LedgerError):
    """Raised when an operation targets a data point that does not exist."""
    code = ErrorCode.NOT_FOUND


class PermissionDeniedError(LedgerError):
    """Raised when the caller's organization may not run the operation."""
    code = ErrorCode.PERMISSION_DENIED


class RecordDecodeError(LedgerError):
    """Raised when a stored value cannot be decoded into a data point."""
    code = ErrorCode.DECODE_FAILURE
