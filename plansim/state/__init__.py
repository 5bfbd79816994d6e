"""State collaborators: key/value store, named keys, program modules."""

from plansim.state.store import StateStore, MemoryStore, KEY_PREFIX, PROGRAM_PREFIX
from plansim.state.keys import KeyStore, derive_address, address_to_str
from plansim.state.programs import ProgramLoader

__all__ = [
    "StateStore", "MemoryStore", "KEY_PREFIX", "PROGRAM_PREFIX",
    "KeyStore", "derive_address", "address_to_str",
    "ProgramLoader",
]
