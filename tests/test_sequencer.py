"""Tests for the step sequencer."""

import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from spiegel.wizard.exceptions import OutOfRangeError, UnknownStepError, ValidationError
from spiegel.wizard.sequencer import StepSequencer


STEPS = ["step1", "step2", "step3"]


@pytest.fixture
def sequencer():
    return StepSequencer(STEPS)


class TestNavigation:
    """Test cursor movement."""

    def test_starts_at_first_step(self, sequencer):
        assert sequencer.cursor == 0
        assert sequencer.current_step_name() == "step1"
        assert sequencer.is_at_start()

    def test_advance(self, sequencer):
        sequencer.advance()
        assert sequencer.current_step_name() == "step2"

    def test_retreat(self, sequencer):
        sequencer.seek_by_index(2)
        sequencer.retreat()
        assert sequencer.current_step_name() == "step2"

    def test_retreat_at_start_fails(self, sequencer):
        with pytest.raises(OutOfRangeError):
            sequencer.retreat()
        assert sequencer.cursor == 0

    def test_seek_by_index(self, sequencer):
        sequencer.seek_by_index(1)
        assert sequencer.current_step_name() == "step2"

    @pytest.mark.parametrize("index", range(len(STEPS)))
    def test_seek_every_valid_index(self, sequencer, index):
        sequencer.seek_by_index(index)
        assert sequencer.current_step_name() == STEPS[index]

    @pytest.mark.parametrize("index", [-1, len(STEPS)])
    def test_seek_out_of_range(self, sequencer, index):
        sequencer.seek_by_index(1)
        with pytest.raises(OutOfRangeError) as exc_info:
            sequencer.seek_by_index(index)
        assert exc_info.value.index == index
        assert sequencer.current_step_name() == "step2"

    def test_seek_rejects_non_integer(self, sequencer):
        with pytest.raises(OutOfRangeError):
            sequencer.seek_by_index("1")
        with pytest.raises(OutOfRangeError):
            sequencer.seek_by_index(True)
        assert sequencer.cursor == 0

    def test_seek_by_name_then_advance(self, sequencer):
        sequencer.seek_by_name("step2")
        sequencer.advance()
        assert sequencer.current_step_name() == "step3"
        assert sequencer.is_at_end()

    def test_seek_by_name_matches_seek_by_index(self, sequencer):
        other = StepSequencer(STEPS)
        for index, name in enumerate(STEPS):
            sequencer.seek_by_name(name)
            other.seek_by_index(index)
            assert sequencer.cursor == other.cursor

    def test_seek_unknown_name(self, sequencer):
        sequencer.advance()
        with pytest.raises(UnknownStepError) as exc_info:
            sequencer.seek_by_name("unknown")
        assert exc_info.value.step == "unknown"
        assert not isinstance(exc_info.value, OutOfRangeError)
        assert sequencer.current_step_name() == "step2"


class TestEnd:
    """Test reaching and running past the final step."""

    def test_reached_end(self, sequencer):
        sequencer.advance()
        assert not sequencer.is_at_end()

        sequencer.advance()
        assert sequencer.is_at_end()

    def test_advance_past_end_fails(self, sequencer):
        sequencer.advance()
        sequencer.advance()
        with pytest.raises(OutOfRangeError):
            sequencer.advance()
        assert sequencer.current_step_name() == "step3"
        assert sequencer.is_at_end()

    def test_single_step_is_at_end(self):
        sequencer = StepSequencer(["only"])
        assert sequencer.is_at_start()
        assert sequencer.is_at_end()
        with pytest.raises(OutOfRangeError):
            sequencer.advance()


class TestConstruction:
    """Test sequencer construction and queries."""

    def test_empty_steps_rejected(self):
        with pytest.raises(OutOfRangeError):
            StepSequencer([])

    def test_duplicate_steps_rejected(self):
        with pytest.raises(ValidationError):
            StepSequencer(["a", "b", "a"])

    def test_steps_are_immutable(self):
        names = ["a", "b"]
        sequencer = StepSequencer(names)
        names.append("c")
        assert sequencer.steps == ("a", "b")
        assert len(sequencer) == 2

    def test_current_name_is_idempotent(self, sequencer):
        sequencer.advance()
        assert sequencer.current_step_name() == sequencer.current_step_name() == "step2"

    def test_position_is_one_based(self, sequencer):
        assert sequencer.position() == 1
        sequencer.seek_by_index(2)
        assert sequencer.position() == 3


class TestDescriptorFetch:
    """Test fetching the current step's descriptor."""

    @pytest.mark.asyncio
    async def test_fetches_current_step(self):
        repository = MagicMock()
        repository.get_step_descriptor = AsyncMock(side_effect=lambda name: {"name": name})
        sequencer = StepSequencer(STEPS, repository=repository)
        sequencer.advance()

        descriptor = await sequencer.current_step_descriptor()

        assert descriptor == {"name": "step2"}
        repository.get_step_descriptor.assert_awaited_once_with("step2")

    @pytest.mark.asyncio
    async def test_missing_descriptor_is_none(self):
        repository = MagicMock()
        repository.get_step_descriptor = AsyncMock(return_value=None)
        sequencer = StepSequencer(STEPS, repository=repository)

        assert await sequencer.current_step_descriptor() is None

    @pytest.mark.asyncio
    async def test_repository_errors_propagate(self):
        from spiegel.wizard.exceptions import NotFoundError

        error = NotFoundError("gone")
        repository = MagicMock()
        repository.get_step_descriptor = AsyncMock(side_effect=error)
        sequencer = StepSequencer(STEPS, repository=repository)

        with pytest.raises(NotFoundError) as exc_info:
            await sequencer.current_step_descriptor()
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_without_repository(self, sequencer):
        with pytest.raises(RuntimeError):
            await sequencer.current_step_descriptor()


def test_concurrent_advances_stay_in_range():
    """Many threads racing to advance never push the cursor past the end."""
    sequencer = StepSequencer([f"s{i}" for i in range(50)])
    failures = []

    def worker():
        for _ in range(20):
            try:
                sequencer.advance()
            except OutOfRangeError:
                failures.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sequencer.is_at_end()
    assert sequencer.cursor == 49
    assert len(failures) == 8 * 20 - 49
