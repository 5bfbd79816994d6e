"""Test fixtures: in-memory store, fake interpreter, program module, step builder.

All tests should use these fixtures for consistency.
"""

import base64
import hashlib
import json

import pytest

from plansim.core.runner import PlanRunner
from plansim.state.keys import KeyStore
from plansim.state.programs import ProgramLoader
from plansim.state.store import MemoryStore
from plansim.types import CallResult


class FakeInterpreter:
    """Deterministic interpreter: records every call and returns canned results."""

    def __init__(self, results: list = None, balance: int = 1_000, error: Exception = None):
        self.results = [b"\x2a"] if results is None else results
        self.balance = balance
        self.error = error
        self.calls: list[dict] = []

    def invoke(self, store, program_id, params, method, max_units):
        self.calls.append({
            "program_id": program_id,
            "params": list(params),
            "method": method,
            "max_units": max_units,
        })
        if self.error is not None:
            raise self.error
        call_id = hashlib.sha256(program_id + method.encode() + bytes([len(self.calls)])).digest()
        return CallResult(call_id=call_id, results=list(self.results), balance=self.balance)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def key_store():
    return KeyStore()


@pytest.fixture
def program_loader():
    return ProgramLoader()


@pytest.fixture
def interpreter():
    return FakeInterpreter()


@pytest.fixture
def make_interpreter():
    """Factory for interpreters with custom results/balance/error."""
    return FakeInterpreter


@pytest.fixture
def runner(store, interpreter):
    return PlanRunner(store, interpreter=interpreter)


@pytest.fixture
def program_file(tmp_path):
    """A program module on disk with a path well over 32 bytes."""
    modules = tmp_path / "programs"
    modules.mkdir()
    path = modules / "token_program.wasm"
    path.write_bytes(b"\x00asm\x01\x00\x00\x00token")
    return path


def _encode(value) -> str:
    if isinstance(value, str):
        value = value.encode()
    return base64.b64encode(value).decode()


@pytest.fixture
def step_json():
    """Build the wire JSON for a step: step_json("execute", "call", [("id", "step_1")])."""
    def _build(endpoint: str, method: str, params: list, max_units: int = 0) -> str:
        return json.dumps({
            "endpoint": endpoint,
            "method": method,
            "maxUnits": max_units,
            "params": [{"type": t, "value": _encode(v)} for t, v in params],
        })
    return _build
