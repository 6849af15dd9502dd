"""
Caller Identity

The ledger never authenticates anyone. It asks an injected identity
source which organization (MSP id) submitted the current transaction
and compares that string against policy.
"""

from __future__ import annotations
from dataclasses import dataclass


class CallerIdentity:
    """Abstract source of the invoking organization's identity."""

    def get_msp_id(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class StaticCallerIdentity(CallerIdentity):
    """Identity fixed at construction. Used by tests and the CLI."""
    msp_id: str

    def get_msp_id(self) -> str:
        return self.msp_id


__all__ = ['CallerIdentity', 'StaticCallerIdentity']
