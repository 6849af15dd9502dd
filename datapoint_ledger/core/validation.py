"""Argument checks run before any backend access."""

from __future__ import annotations
import math
from typing import Any

from ..contracts.base import MIN_TEMPERATURE, MAX_TEMPERATURE, InvalidArgumentError


def validate_id(point_id: Any) -> str:
    if not isinstance(point_id, str) or not point_id:
        raise InvalidArgumentError(
            "Invalid ID. It must be a non-empty string.",
            point_id=repr(point_id)
        )
    return point_id


def is_valid_temperature(
    temperature: Any,
    min_temperature: float = MIN_TEMPERATURE,
    max_temperature: float = MAX_TEMPERATURE
) -> bool:
    # bool is an int subclass; True is not a temperature
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        return False
    if isinstance(temperature, float) and math.isnan(temperature):
        return False
    return min_temperature <= temperature <= max_temperature


def validate_temperature(
    temperature: Any,
    min_temperature: float = MIN_TEMPERATURE,
    max_temperature: float = MAX_TEMPERATURE
):
    if not is_valid_temperature(temperature, min_temperature, max_temperature):
        raise InvalidArgumentError(
            f"Invalid temperature. It must be a number between "
            f"{min_temperature:g} and {max_temperature:g}°C.",
            temperature=repr(temperature)
        )
    return temperature

