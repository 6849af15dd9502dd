"""
Shared fixtures: in-memory world state, static caller identities, and a
backend wrapper that counts writes so tests can assert "no write" rules.
"""

import pytest

from datapoint_ledger.core.contract import EnvironmentalDataContract, TransactionContext
from datapoint_ledger.identity import StaticCallerIdentity
from datapoint_ledger.storage import InMemoryKeyValueBackend, KeyValueBackend

ORG1 = "Org1MSP"
ORG2 = "Org2MSP"


class CountingBackend(KeyValueBackend):
    """Delegating backend that records every call."""

    def __init__(self, inner: KeyValueBackend):
        self.inner = inner
        self.gets = []
        self.puts = []
        self.deletes = []
        self.scans = 0

    def get(self, key):
        self.gets.append(key)
        return self.inner.get(key)

    def put(self, key, value):
        self.puts.append((key, value))
        self.inner.put(key, value)

    def delete(self, key):
        self.deletes.append(key)
        self.inner.delete(key)

    def scan(self, start_key="", end_key=""):
        self.scans += 1
        return self.inner.scan(start_key, end_key)

    def reset(self):
        self.gets.clear()
        self.puts.clear()
        self.deletes.clear()
        self.scans = 0


@pytest.fixture
def backend():
    return CountingBackend(InMemoryKeyValueBackend())


@pytest.fixture
def contract():
    return EnvironmentalDataContract()


@pytest.fixture
def ctx(backend):
    """Caller from Org1."""
    return TransactionContext(stub=backend, client_identity=StaticCallerIdentity(ORG1))


@pytest.fixture
def org2_ctx(backend):
    """Caller from the organization allowed to run the consensus recheck."""
    return TransactionContext(stub=backend, client_identity=StaticCallerIdentity(ORG2))
