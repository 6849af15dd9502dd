import json
import math
from decimal import Decimal
from typing import Any, Union

Number = Union[int, float]


def normalize_number(value: Number) -> Number:
    """
    Collapse integral floats to int so 25.0 and 25 store the same bytes.

    Every node computing the same update must emit identical bytes, so a
    number has exactly one representation on the ledger.
    """
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def format_number(value: Number) -> str:
    """
    Render a number the way it appears inside stored documents and alerts.

    Integral values print without a fraction, other values in their shortest
    round-trip form, never in exponent notation.
    """
    value = normalize_number(value)
    if isinstance(value, int):
        return str(value)
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def canonical_json(document: Any) -> str:
    """
    Deterministic JSON rendering.

    RULES:
    1. Keys sorted at every depth.
    2. Compact separators, no whitespace.
    3. Non-ASCII characters emitted verbatim (the degree sign stays one char).
    """
    return json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_bytes(document: Any) -> bytes:
    return canonical_json(document).encode("utf-8")


def pretty_json(document: Any) -> str:
    """Human-readable rendering for query results (two-space indent)."""
    return json.dumps(document, indent=2, ensure_ascii=False)
