"""
Threshold Alerts

The only place alert text is produced. The consensus recheck compares
stored alerts against this exact string, so every code path must go
through threshold_alert_message.
"""

from __future__ import annotations
from typing import Union

from ..contracts.base import TEMPERATURE_THRESHOLD
from ..domain.serialization import format_number

Number = Union[int, float]

ALERT_TEMPLATE = (
    "Temperature alert! Data point {point_id} has a temperature of "
    "{temperature}°C, exceeding the threshold of {threshold}°C."
)


def exceeds_threshold(temperature: Number, threshold: Number = TEMPERATURE_THRESHOLD) -> bool:
    """Strictly greater: a reading equal to the threshold raises no alert."""
    return temperature > threshold


def threshold_alert_message(
    point_id: str,
    temperature: Number,
    threshold: Number = TEMPERATURE_THRESHOLD
) -> str:
    return ALERT_TEMPLATE.format(
        point_id=point_id,
        temperature=format_number(temperature),
        threshold=format_number(threshold),
    )


def alert_for_new_reading(
    point_id: str,
    temperature: Number,
    threshold: Number = TEMPERATURE_THRESHOLD
) -> str:
    """Alert for a freshly added data point: message if over threshold, else empty."""
    if exceeds_threshold(temperature, threshold):
        return threshold_alert_message(point_id, temperature, threshold)
    return ""


def alert_after_update(
    point_id: str,
    current_alert: str,
    new_temperature: Number,
    threshold: Number = TEMPERATURE_THRESHOLD
) -> str:
    """
    Alert after a temperature update.

    An existing alert is never cleared or rewritten here; an empty alert is
    filled only when the new reading is over threshold.
    """
    if exceeds_threshold(new_temperature, threshold) and not current_alert:
        return threshold_alert_message(point_id, new_temperature, threshold)
    return current_alert
