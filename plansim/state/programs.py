"""Loads program modules from disk into the state store."""

import logging
import secrets
from pathlib import Path
from typing import Optional

from plansim.exceptions import ProgramLoadError
from plansim.state.store import PROGRAM_PREFIX, StateStore
from plansim.types import PROGRAM_ID_LEN

logger = logging.getLogger(__name__)


def _generate_program_id(store: StateStore) -> bytes:
    # random rather than content derived: the same module may be created twice
    while True:
        program_id = secrets.token_bytes(PROGRAM_ID_LEN)
        if not store.has(PROGRAM_PREFIX + program_id):
            return program_id


class ProgramLoader:
    """Stores module bytes under a freshly generated 32-byte program ID."""

    def create(self, store: StateStore, path: str) -> bytes:
        """Read the module at ``path`` and register it.

        Args:
            store: Shared run state
            path: Filesystem path to the program module

        Returns:
            The new program ID (32 bytes)

        Raises:
            ProgramLoadError: if the file cannot be read or is empty
        """
        module_path = Path(path)
        try:
            code = module_path.read_bytes()
        except OSError as exc:
            raise ProgramLoadError(f"failed to read program {path}: {exc}", path=path) from exc
        if not code:
            raise ProgramLoadError(f"program module is empty: {path}", path=path)

        program_id = _generate_program_id(store)
        store.set(PROGRAM_PREFIX + program_id, code)
        logger.info("[ProgramLoader] created program %s from %s (%d bytes)",
                    program_id.hex(), module_path.name, len(code))
        return program_id

    def get(self, store: StateStore, program_id: bytes) -> Optional[bytes]:
        """Module bytes for ``program_id``, or None."""
        return store.get(PROGRAM_PREFIX + program_id)
