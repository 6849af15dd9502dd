"""
Core Record Lifecycle

RESPONSIBILITY: Validation, alert computation, record lifecycle
ALLOWED INPUTS: TransactionContext + transaction arguments
OUTPUTS: Writes to the injected backend, canonical JSON strings

WHAT THIS LAYER MUST NOT DO:
============================
- Talk to a concrete storage technology (only KeyValueBackend)
- Authenticate callers (identity is injected)
- Retry, lock, or order transactions
"""

from .contract import (
    EnvironmentalDataContract,
    TransactionContext,
    SEED_DATA_POINTS,
)
from .alerts import (
    ALERT_TEMPLATE,
    exceeds_threshold,
    threshold_alert_message,
    alert_for_new_reading,
    alert_after_update,
)
from .validation import validate_id, validate_temperature, is_valid_temperature

__all__ = [
    'EnvironmentalDataContract',
    'TransactionContext',
    'SEED_DATA_POINTS',
    'ALERT_TEMPLATE',
    'exceeds_threshold',
    'threshold_alert_message',
    'alert_for_new_reading',
    'alert_after_update',
    'validate_id',
    'validate_temperature',
    'is_valid_temperature',
]
