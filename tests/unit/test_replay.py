"""
Unit tests for session replays.

Tests random access, cursor stepping, flag visibility, tamper detection
and deduction annotations.
"""
from dataclasses import replace

import pytest
import numpy as np
from multisweeper.game import Action, BoardConfig, GameConfig, Minefield, ReplayError
from multisweeper.sessions import GameSession, Replay


@pytest.fixture
def played_duo(duo_session: GameSession) -> GameSession:
    """
    Two-player game on the corners layout:

        0: bob flags (1, 0)
        1: alice reveals (0, 1)
        2: alice flags (0, 0)
        3: alice chords (0, 1) and clears
        4: bob reveals (2, 2), skipping his flagged cell
    """
    session = duo_session
    session.start("alice")
    session.submit_action(1, Action.TOGGLE_FLAG, (1, 0))
    session.submit_action(0, Action.REVEAL, (0, 1))
    session.submit_action(0, Action.TOGGLE_FLAG, (0, 0))
    session.submit_action(0, Action.CHORD, (0, 1))
    session.submit_action(1, Action.REVEAL, (2, 2))
    return session


# ============================================================================
# Random Access Tests
# ============================================================================

class TestReplayTo:
    """Test replay_to positions."""

    def test_length_counts_start_position(self, played_duo: GameSession) -> None:
        assert len(played_duo.replay(privileged=True)) == 6

    def test_start_is_all_hidden(self, played_duo: GameSession) -> None:
        frame = played_duo.replay(privileged=True).replay_to(0)
        assert frame.entry is None
        assert np.all(frame.board(0) == -1)
        assert np.all(frame.board(1) == -1)

    def test_final_frame_matches_session(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(privileged=True)
        frame = game_replay.replay_to(len(game_replay) - 1)
        for index in range(2):
            np.testing.assert_array_equal(
                frame.board(index), played_duo.board_for(index, privileged=True)
            )
        assert [p.score for p in frame.players] == [23, 22]
        assert frame.players[0].cleared is True
        assert frame.players[1].cleared is False

    def test_frame_after_k_entries(self, played_duo: GameSession) -> None:
        frame = played_duo.replay(privileged=True).replay_to(2)
        assert frame.entry.sequence == 1
        assert frame.board(0)[0, 1] == 1
        assert frame.board(1)[1, 0] == -2
        assert frame.players[0].score == 1

    def test_random_access_matches_stepping(self, played_duo: GameSession) -> None:
        stepped = played_duo.replay(privileged=True)
        frames = [stepped.current()]
        while stepped.position < len(stepped) - 1:
            frames.append(stepped.advance())

        for position, expected in enumerate(frames):
            fresh = played_duo.replay(privileged=True)
            actual = fresh.replay_to(position)
            for index in range(2):
                np.testing.assert_array_equal(actual.board(index), expected.board(index))

    def test_frames_are_read_only(self, played_duo: GameSession) -> None:
        frame = played_duo.replay(privileged=True).replay_to(1)
        with pytest.raises(ValueError):
            frame.board(0)[0, 0] = 5

    def test_out_of_range_position(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(privileged=True)
        with pytest.raises(ReplayError, match="out of bounds"):
            game_replay.replay_to(len(game_replay))
        with pytest.raises(ReplayError):
            game_replay.replay_to(-1)

    def test_lazily_placed_layout_is_reproduced(self) -> None:
        session = GameSession(GameConfig(board=BoardConfig(9, 9, 10), seed=5), "solo")
        session.submit_action(0, Action.REVEAL, (4, 4))
        game_replay = session.replay()
        np.testing.assert_array_equal(game_replay.replay_to(1).board(0), session.board_for(0))

    def test_empty_log(self) -> None:
        minefield = Minefield(BoardConfig(4, 4, 2), seed=0)
        game_replay = Replay(minefield, (), 1)
        assert len(game_replay) == 1
        assert np.all(game_replay.replay_to(0).board(0) == -1)


# ============================================================================
# Cursor Tests
# ============================================================================

class TestCursor:
    """Test stepping through a replay."""

    def test_advance_and_rewind(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(privileged=True)
        assert game_replay.position == 0
        game_replay.advance()
        game_replay.advance()
        assert game_replay.position == 2
        frame = game_replay.rewind()
        assert game_replay.position == 1
        assert frame.position == 1

    def test_rewind_at_start(self, played_duo: GameSession) -> None:
        with pytest.raises(ReplayError, match="start"):
            played_duo.replay(privileged=True).rewind()

    def test_advance_at_end(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(privileged=True)
        game_replay.to_position(len(game_replay) - 1)
        with pytest.raises(ReplayError, match="end"):
            game_replay.advance()


# ============================================================================
# Visibility Tests
# ============================================================================

class TestVisibility:
    """Test which flags each viewer sees."""

    def test_owner_sees_all_flags(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(viewer="alice")
        assert len(game_replay) == 6
        final = game_replay.replay_to(5)
        assert final.board(1)[1, 0] == -2

    def test_player_sees_only_own_flags(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(viewer="bob")
        # Alice's flag toggle is not a position of its own.
        assert len(game_replay) == 5
        assert Action.TOGGLE_FLAG in {e.action for e in game_replay.entries}
        final = game_replay.replay_to(4)
        assert final.board(1)[1, 0] == -2
        # Alice's board after the chord: her flag hides as a hidden cell.
        assert final.board(0)[0, 0] == -1

    def test_spectator_sees_no_flags(self, played_duo: GameSession) -> None:
        game_replay = played_duo.replay(viewer="carol")
        assert len(game_replay) == 4
        assert all(e.action is not Action.TOGGLE_FLAG for e in game_replay.entries)
        final = game_replay.replay_to(3)
        assert final.board(1)[1, 0] == -1
        # Hidden flags are still folded in, so the chord reproduces.
        assert final.players[0].cleared is True

    def test_singleplayer_replay_shows_flags(self, solo_session: GameSession) -> None:
        solo_session.submit_action(0, Action.REVEAL, (0, 1))
        solo_session.submit_action(0, Action.TOGGLE_FLAG, (0, 0))
        final = solo_session.replay(viewer="someone-else").replay_to(2)
        assert final.board(0)[0, 0] == -2


# ============================================================================
# Integrity and Annotation Tests
# ============================================================================

class TestIntegrity:
    """Test detection of logs that do not reproduce."""

    def test_tampered_effect_detected(self, played_duo: GameSession) -> None:
        entries = list(played_duo.log)
        entries[1] = replace(entries[1], effect=replace(entries[1].effect, revealed=()))
        game_replay = Replay(played_duo.minefield, entries, 2)
        with pytest.raises(ReplayError, match="did not reproduce"):
            game_replay.replay_to(2)

    def test_rejected_action_detected(self, played_duo: GameSession) -> None:
        entries = list(played_duo.log)
        entries[3] = replace(entries[3], point=(4, 4))
        game_replay = Replay(played_duo.minefield, entries, 2)
        with pytest.raises(ReplayError, match="rejected"):
            game_replay.replay_to(4)

    def test_unknown_player_detected(self, played_duo: GameSession) -> None:
        game_replay = Replay(played_duo.minefield, played_duo.log, 1)
        with pytest.raises(ReplayError, match="player 1"):
            game_replay.replay_to(1)


class TestAnnotations:
    """Test deduction annotations on replay frames."""

    def test_annotate_position(self, wall_minefield: Minefield) -> None:
        session = GameSession(
            GameConfig(board=wall_minefield.config), "solo", minefield=wall_minefield
        )
        session.submit_action(0, Action.REVEAL, (0, 0))
        game_replay = session.replay()

        assert game_replay.annotate(0, 0).is_empty is True
        assert game_replay.annotate(0, 1).definitely_mine == {(0, 2), (1, 2), (2, 2)}
        assert len(game_replay.annotations(0)) == len(game_replay)
