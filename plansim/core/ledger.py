"""Run ledger: step index -> generated identifier, plus the step counter.

Scoped to one plan run. Entries are only ever added, never removed or
overwritten, so a ``step_N`` reference means the same thing for the rest
of the run.
"""

from typing import Iterator, Optional

from plansim.types import PROGRAM_ID_LEN, program_id_to_str


class RunLedger:
    """Append-only identifier table owned by a PlanRunner."""

    def __init__(self):
        self._ids: dict[int, bytes] = {}
        self._step = 0

    @property
    def step(self) -> int:
        """Index the next step will run at."""
        return self._step

    def advance(self) -> int:
        """Move the counter past the current step and return the new value."""
        self._step += 1
        return self._step

    def record(self, step_index: int, identifier: bytes) -> None:
        """Remember the identifier produced by ``step_index``.

        Raises:
            ValueError: if the identifier is not 32 bytes or the index is
                already recorded
        """
        if len(identifier) != PROGRAM_ID_LEN:
            raise ValueError(
                f"identifier for step {step_index} must be {PROGRAM_ID_LEN} bytes, got {len(identifier)}"
            )
        if step_index in self._ids:
            raise ValueError(f"step {step_index} already has an identifier recorded")
        self._ids[step_index] = bytes(identifier)

    def lookup(self, step_index: int) -> Optional[bytes]:
        return self._ids.get(step_index)

    def __contains__(self, step_index: int) -> bool:
        return step_index in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))

    def as_dict(self) -> dict[int, str]:
        """Text form of every entry, ordered by step index."""
        return {i: program_id_to_str(self._ids[i]) for i in sorted(self._ids)}
