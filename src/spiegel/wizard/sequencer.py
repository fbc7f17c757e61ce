"""
Spiegel Step Sequencer

Ordered list of step names plus a cursor. Every move is checked before it is
committed, so the cursor never leaves [0, len(steps)) and a failed move
leaves it where it was.
"""

import threading
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from spiegel.wizard.exceptions import OutOfRangeError, UnknownStepError, ValidationError
from spiegel.wizard.logging_config import get_logger

if TYPE_CHECKING:
    from spiegel.wizard.repository import StepDescriptor, StepRepository


logger = get_logger("sequencer")


class StepSequencer:
    """Cursor over a fixed, ordered sequence of step names."""

    def __init__(self, steps: Iterable[str], repository: Optional["StepRepository"] = None):
        self._steps: Tuple[str, ...] = tuple(steps)
        if not self._steps:
            raise OutOfRangeError("Cannot sequence an empty list of steps.", index=0, length=0)
        if len(set(self._steps)) != len(self._steps):
            raise ValidationError("Step names must be unique.", field="steps")

        self._repository = repository
        self._cursor = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"StepSequencer(steps={list(self._steps)!r}, cursor={self._cursor})"

    @property
    def steps(self) -> Tuple[str, ...]:
        return self._steps

    @property
    def cursor(self) -> int:
        return self._cursor

    def position(self) -> int:
        """1-based position of the current step, for progress display."""
        return self._cursor + 1

    def advance(self):
        """Move to the next step.

        Raises:
            OutOfRangeError: If the current step is already the last one
        """
        with self._lock:
            target = self._cursor + 1
            if target >= len(self._steps):
                raise OutOfRangeError(
                    "No more steps remain.",
                    index=target,
                    length=len(self._steps),
                )
            self._commit(target)

    def retreat(self):
        """Move to the previous step.

        Raises:
            OutOfRangeError: If the current step is the first one
        """
        with self._lock:
            target = self._cursor - 1
            if target < 0:
                raise OutOfRangeError(
                    "Already at the first step.",
                    index=target,
                    length=len(self._steps),
                )
            self._commit(target)

    def seek_by_index(self, index: int):
        """Jump to the step at index."""
        with self._lock:
            if not isinstance(index, int) or isinstance(index, bool):
                raise OutOfRangeError(f"Step index must be an integer, got {index!r}.")
            if index < 0 or index >= len(self._steps):
                raise OutOfRangeError(
                    f"Step index {index} is out of range.",
                    index=index,
                    length=len(self._steps),
                )
            self._commit(index)

    def seek_by_name(self, name: str):
        """Jump to the step called name.

        Raises:
            UnknownStepError: If name is not one of the steps
        """
        with self._lock:
            try:
                index = self._steps.index(name)
            except ValueError:
                raise UnknownStepError(f"Unknown step '{name}'.", step=name) from None
            self._commit(index)

    def is_at_start(self) -> bool:
        return self._cursor == 0

    def is_at_end(self) -> bool:
        """True once the final step is current (not past it)."""
        return self._cursor == len(self._steps) - 1

    def current_step_name(self) -> str:
        return self._steps[self._cursor]

    async def current_step_descriptor(self) -> Optional["StepDescriptor"]:
        """Fetch the descriptor of the current step.

        Repository errors propagate unchanged. A repository that has no
        descriptor to give returns None, which is passed through.
        """
        if self._repository is None:
            raise RuntimeError("StepSequencer has no repository to load descriptors from")
        return await self._repository.get_step_descriptor(self.current_step_name())

    def _commit(self, index: int):
        previous = self._cursor
        self._cursor = index
        if previous != index:
            logger.debug(
                "Moved from step '%s' to '%s' (%d/%d)",
                self._steps[previous], self._steps[index], index + 1, len(self._steps),
            )
