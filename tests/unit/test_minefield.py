"""
Unit tests for Minefield class.

Tests mine placement, the safe opening guarantee, layout restoration
and adjacency counts.
"""
import pytest
import numpy as np
from multisweeper.game import BoardConfig, InvalidConfiguration, Minefield


# ============================================================================
# Generation Tests
# ============================================================================

class TestGenerate:
    """Test eager generation with an excluded region."""

    def test_places_requested_mines(self) -> None:
        minefield = Minefield.generate(8, 8, 10, seed=3)
        assert minefield.is_placed is True
        assert len(minefield.mines) == 10

    def test_excluded_region_stays_clear(self) -> None:
        """No mine lands in the excluded region."""
        region = [(r, c) for r in range(3) for c in range(3)]
        for seed in range(20):
            minefield = Minefield.generate(5, 5, 16, region, seed=seed)
            assert not minefield.mines & set(region)

    def test_out_of_bounds_exclusions_ignored(self) -> None:
        minefield = Minefield.generate(2, 2, 3, [(-1, -1), (5, 5)], seed=0)
        assert len(minefield.mines) == 3

    def test_too_many_mines_raises_error(self) -> None:
        with pytest.raises(InvalidConfiguration, match="Cannot place"):
            Minefield.generate(3, 3, 9, [(1, 1)])

    def test_every_cell_can_hold_a_mine(self) -> None:
        minefield = Minefield.generate(3, 3, 9, (), seed=0)
        assert len(minefield.mines) == 9
        assert minefield.safe_cells == 0

    def test_non_positive_dimensions_raise_error(self) -> None:
        with pytest.raises(InvalidConfiguration):
            Minefield.generate(0, 3, 0)

    def test_same_seed_same_layout(self) -> None:
        first = Minefield.generate(9, 9, 10, seed=11)
        second = Minefield.generate(9, 9, 10, seed=11)
        assert first.mines == second.mines


# ============================================================================
# Lazy Placement Tests
# ============================================================================

class TestLazyPlacement:
    """Test placement on the first reveal."""

    def test_unplaced_until_first_click(self, beginner_minefield: Minefield) -> None:
        assert beginner_minefield.is_placed is False
        with pytest.raises(ValueError, match="not been placed"):
            beginner_minefield.is_mine((0, 0))

    def test_first_click_opening_is_safe(self) -> None:
        """The first click and its neighbors never hold a mine."""
        for seed in range(30):
            minefield = Minefield(BoardConfig(9, 9, 10), seed=seed)
            minefield.place_mines((4, 4))
            assert not minefield.mines & minefield.opening_region((4, 4))
            assert len(minefield.mines) == 10

    def test_corner_click_opening_is_safe(self) -> None:
        minefield = Minefield(BoardConfig(4, 4, 7), seed=5)
        minefield.place_mines((0, 0))
        assert not minefield.mines & {(0, 0), (0, 1), (1, 0), (1, 1)}

    def test_placement_happens_once(self, beginner_minefield: Minefield) -> None:
        assert beginner_minefield.place_mines((0, 0)) is True
        mines = beginner_minefield.mines
        assert beginner_minefield.place_mines((8, 8)) is False
        assert beginner_minefield.mines == mines

    def test_seed_and_click_determine_layout(self) -> None:
        first = Minefield(BoardConfig(9, 9, 10), seed=8)
        second = Minefield(BoardConfig(9, 9, 10), seed=8)
        first.place_mines((2, 3))
        second.place_mines((2, 3))
        assert first.mines == second.mines

    def test_without_safe_opening_only_click_is_safe(self) -> None:
        config = BoardConfig(3, 3, 8, safe_opening=False)
        minefield = Minefield(config, seed=0)
        minefield.place_mines((1, 1))
        assert (1, 1) not in minefield.mines
        assert len(minefield.mines) == 8

    def test_unplaced_board_needs_room_for_opening(self) -> None:
        with pytest.raises(InvalidConfiguration, match="Too many mines"):
            Minefield(BoardConfig(3, 3, 9))


# ============================================================================
# Layout Tests
# ============================================================================

class TestLayout:
    """Test restored layouts and adjacency."""

    def test_adjacency_counts(self, wall_minefield: Minefield) -> None:
        expected = np.array([
            [0, 2, 9, 2, 0],
            [0, 3, 9, 3, 0],
            [0, 2, 9, 2, 0],
        ])
        np.testing.assert_array_equal(wall_minefield.to_array(), expected)

    def test_adjacency_count_lookup(self, corners_minefield: Minefield) -> None:
        assert corners_minefield.adjacency_count((0, 1)) == 1
        assert corners_minefield.adjacency_count((2, 2)) == 0
        assert corners_minefield.is_mine((4, 4)) is True

    def test_layout_mine_off_board(self) -> None:
        with pytest.raises(InvalidConfiguration, match="off the board"):
            Minefield.from_layout(BoardConfig(5, 5, 2), [(0, 0), (5, 0)])

    def test_layout_wrong_count(self) -> None:
        with pytest.raises(InvalidConfiguration, match="expected 2"):
            Minefield.from_layout(BoardConfig(5, 5, 2), [(0, 0)])

    def test_copy_unplayed_keeps_layout(self, corners_minefield: Minefield) -> None:
        copy = corners_minefield.copy_unplayed()
        assert copy is not corners_minefield
        assert copy.mines == corners_minefield.mines

    def test_copy_unplayed_before_placement_keeps_seed(
        self, beginner_minefield: Minefield
    ) -> None:
        copy = beginner_minefield.copy_unplayed()
        assert copy.is_placed is False
        assert copy.seed == beginner_minefield.seed


# ============================================================================
# Neighbor Tests
# ============================================================================

class TestNeighbors:
    """Test neighbor enumeration."""

    def test_corner_has_three_neighbors(self, corners_minefield: Minefield) -> None:
        assert len(corners_minefield.neighbors((0, 0))) == 3

    def test_center_has_eight_neighbors(self, corners_minefield: Minefield) -> None:
        assert len(corners_minefield.neighbors((2, 2))) == 8

    def test_neighbor_order_is_fixed(self, corners_minefield: Minefield) -> None:
        assert corners_minefield.neighbors((0, 1)) == [(0, 0), (0, 2), (1, 0), (1, 1), (1, 2)]
