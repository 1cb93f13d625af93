"""
Unit tests for the event log.
"""
import threading

import pytest
from multisweeper.game import Action, CellState, RevealEffect
from multisweeper.sessions import EventLog, LogEntry


def flag_effect(point) -> RevealEffect:
    return RevealEffect(Action.TOGGLE_FLAG, point, flag=CellState.FLAGGED)


# ============================================================================
# Recording Tests
# ============================================================================

class TestRecording:
    """Test appends and reads."""

    def test_sequences_are_contiguous(self) -> None:
        log = EventLog()
        entries = [log.record(i % 2, Action.TOGGLE_FLAG, flag_effect((0, i))) for i in range(5)]
        assert [e.sequence for e in entries] == [0, 1, 2, 3, 4]
        assert log.next_sequence == 5

    def test_entry_takes_point_from_effect(self) -> None:
        log = EventLog()
        entry = log.record(0, Action.TOGGLE_FLAG, flag_effect((2, 3)))
        assert entry.point == (2, 3)
        assert log[0] is entry

    def test_entries_upto(self) -> None:
        log = EventLog()
        for i in range(4):
            log.record(0, Action.TOGGLE_FLAG, flag_effect((0, i)))
        assert [e.sequence for e in log.entries(upto=2)] == [0, 1]
        assert len(log.entries()) == 4
        assert [e.sequence for e in log] == [0, 1, 2, 3]

    def test_concurrent_appends_get_unique_sequences(self) -> None:
        log = EventLog()

        def writer(player: int) -> None:
            for i in range(200):
                log.record(player, Action.TOGGLE_FLAG, flag_effect((player, i)))

        threads = [threading.Thread(target=writer, args=(p,)) for p in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert [e.sequence for e in log] == list(range(800))


# ============================================================================
# Restore Tests
# ============================================================================

class TestRestore:
    """Test rebuilding a log from stored entries."""

    def test_from_entries(self) -> None:
        log = EventLog()
        log.record(0, Action.TOGGLE_FLAG, flag_effect((0, 0)))
        log.record(1, Action.TOGGLE_FLAG, flag_effect((0, 1)))
        restored = EventLog.from_entries(
            LogEntry.from_dict(e.to_dict()) for e in log.entries()
        )
        assert restored.entries() == log.entries()

    def test_gap_in_sequence_rejected(self) -> None:
        entry = LogEntry(1, 0, Action.TOGGLE_FLAG, (0, 0), flag_effect((0, 0)))
        with pytest.raises(ValueError, match="expected 0"):
            EventLog.from_entries([entry])
