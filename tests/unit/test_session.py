"""
Unit tests for the game session.

Tests the session lifecycle, lazy mine placement, reveal and flag
transitions, terminal states and snapshot ownership.
"""
import pytest
import numpy as np
from dataclasses import replace
from powersweep import (
    GameSession,
    PowerUpId,
    GameStatus,
    MEDIUM,
    OutOfBounds,
    UnknownDifficulty,
    change_difficulty,
    new_session,
    reset,
    reveal,
    tick,
    toggle_flag,
    use_power_up,
)

WALL = [(row, 2) for row in range(5)]


# ============================================================================
# Lifecycle Tests
# ============================================================================

class TestLifecycle:
    """Test session creation and replacement."""

    def test_new_session_defaults(self, easy_session: GameSession) -> None:
        """A fresh session is playing with zeroed counters and no effects."""
        assert easy_session.status == GameStatus.PLAYING
        assert easy_session.elapsed_seconds == 0
        assert easy_session.flagged_count == 0
        assert easy_session.mine_count == 10
        assert easy_session.mines_placed is False
        assert not easy_session.xray_active
        assert not easy_session.time_frozen

    def test_mines_not_placed_at_creation(
        self, easy_session: GameSession
    ) -> None:
        """Mines should not be placed until the first reveal."""
        assert easy_session.board.count_mines() == 0

    def test_unknown_difficulty_raises(self) -> None:
        """An unknown preset key should raise UnknownDifficulty."""
        with pytest.raises(UnknownDifficulty):
            new_session("impossible")

    def test_reset_replaces_board(self, easy_session: GameSession) -> None:
        """Reset should start over on a blank board of the same size."""
        played = reveal(easy_session, 4, 4, rng=np.random.default_rng(0))
        fresh = reset(played)
        assert fresh.mines_placed is False
        assert fresh.board.count_revealed() == 0
        assert fresh.difficulty == played.difficulty

    def test_reset_with_difficulty(self, easy_session: GameSession) -> None:
        """Reset with a difficulty should switch board size and mines."""
        fresh = reset(easy_session, MEDIUM)
        assert fresh.board.rows == 16
        assert fresh.mine_count == 40

    def test_reset_restores_power_ups(self, easy_session: GameSession) -> None:
        """Reset should refill charges and clear cooldowns and effects."""
        used = use_power_up(easy_session, "xray", 0)
        fresh = reset(used)
        xray = fresh.get_power_up("xray")
        assert xray.uses_remaining == xray.max_uses
        assert xray.last_used_at_ms is None
        assert fresh.xray_active is False

    def test_change_difficulty(self, easy_session: GameSession) -> None:
        """Changing difficulty should resize the board."""
        hard = change_difficulty(easy_session, "hard")
        assert (hard.board.rows, hard.board.cols) == (16, 30)

    def test_change_difficulty_unknown(self, easy_session: GameSession) -> None:
        """Changing to an unknown preset should raise."""
        with pytest.raises(UnknownDifficulty):
            change_difficulty(easy_session, "legendary")


# ============================================================================
# First Reveal Tests
# ============================================================================

class TestFirstReveal:
    """Test lazy, first-click-safe mine placement."""

    def test_first_reveal_places_mines(self, easy_session: GameSession) -> None:
        """First reveal should place exactly the configured mines."""
        played = reveal(easy_session, 0, 0, rng=np.random.default_rng(1))
        assert played.mines_placed is True
        assert played.board.count_mines() == 10

    @pytest.mark.parametrize("seed", range(20))
    def test_corner_click_is_always_safe(
        self, easy_session: GameSession, seed: int
    ) -> None:
        """A corner first click and its neighbors are never mines."""
        played = reveal(easy_session, 0, 0, rng=np.random.default_rng(seed))
        assert played.status != GameStatus.LOST
        for position in [(0, 0), (0, 1), (1, 0), (1, 1)]:
            assert not played.board.get_cell(*position).is_mine

    def test_status_only_changes_after_reveal(
        self, easy_session: GameSession
    ) -> None:
        """Flags and ticks alone never end the game."""
        flagged = toggle_flag(easy_session, 3, 3)
        ticked = tick(flagged, 1000)
        assert ticked.status == GameStatus.PLAYING

    def test_placement_happens_once(self, easy_session: GameSession) -> None:
        """Later reveals should keep the first layout."""
        first = reveal(easy_session, 4, 4, rng=np.random.default_rng(2))
        mines = first.board.mine_positions()
        hidden = next(
            cell for cell in first.board.cells()
            if cell.is_hidden and not cell.is_mine
        )
        second = reveal(first, hidden.row, hidden.col, rng=np.random.default_rng(99))
        assert second.board.mine_positions() == mines


# ============================================================================
# Reveal Tests
# ============================================================================

class TestReveal:
    """Test reveal transitions on known layouts."""

    def test_reveal_floods_region(self, session_factory) -> None:
        """Revealing a zero cell should open its region and border."""
        session = session_factory(5, 5, WALL)
        played = reveal(session, 0, 0)
        assert played.board.count_revealed() == 10
        assert played.status == GameStatus.PLAYING

    def test_revealing_revealed_cell_is_noop(self, session_factory) -> None:
        """Revealing a revealed cell returns the same session."""
        session = session_factory(5, 5, WALL, revealed=[(0, 1)])
        assert reveal(session, 0, 1) is session

    def test_flag_then_reveal_is_noop(self, easy_session: GameSession) -> None:
        """A flagged cell stays flagged and hidden when revealed."""
        flagged = toggle_flag(easy_session, 2, 2)
        after = reveal(flagged, 2, 2)
        assert after is flagged
        cell = after.board.get_cell(2, 2)
        assert cell.is_flagged and not cell.is_revealed

    def test_win_when_all_safe_cells_revealed(self, session_factory) -> None:
        """Opening every safe cell should win."""
        session = session_factory(5, 5, [(4, 4)])
        played = reveal(session, 0, 0)
        assert played.status == GameStatus.WON
        assert played.board.count_revealed() == 25 - 1

    def test_win_checked_after_each_reveal(self, session_factory) -> None:
        """The win check should run after every reveal."""
        session = session_factory(1, 3, [(0, 0)])
        once = reveal(session, 0, 1)
        assert once.status == GameStatus.PLAYING
        twice = reveal(once, 0, 2)
        assert twice.status == GameStatus.WON

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, 5), (5, 5)])
    def test_out_of_bounds_raises(self, session_factory, row, col) -> None:
        """Coordinates off the board should raise OutOfBounds."""
        session = session_factory(5, 5, WALL)
        with pytest.raises(OutOfBounds):
            reveal(session, row, col)


# ============================================================================
# Loss Tests
# ============================================================================

class TestLoss:
    """Test hitting a mine and terminality."""

    def no_safe_click(self, session: GameSession) -> GameSession:
        power_ups = dict(session.power_ups)
        del power_ups[PowerUpId.SAFE_CLICK]
        return replace(session, power_ups=power_ups)

    def test_mine_loses_and_reveals_all_mines(self, session_factory) -> None:
        """Hitting a mine loses and uncovers every mine."""
        session = self.no_safe_click(session_factory(5, 5, WALL))
        lost = reveal(session, 2, 2)
        assert lost.status == GameStatus.LOST
        for position in WALL:
            assert lost.board.get_cell(*position).is_revealed

    def test_flag_count_matches_board_after_loss(self, session_factory) -> None:
        """Flagged mines uncovered by a loss leave the flag count."""
        session = self.no_safe_click(
            session_factory(3, 3, [(0, 0), (2, 2)], flagged=[(0, 0)])
        )
        assert session.flagged_count == 1
        lost = reveal(session, 2, 2)
        assert lost.status == GameStatus.LOST
        assert lost.board.get_cell(0, 0).is_revealed
        assert lost.flagged_count == lost.board.count_flagged() == 0
        assert lost.remaining_mines == 2

    def test_lost_session_ignores_everything(self, session_factory) -> None:
        """A lost session ignores reveals, flags, power-ups and ticks."""
        lost = reveal(self.no_safe_click(session_factory(5, 5, WALL)), 0, 2)
        assert reveal(lost, 0, 0) is lost
        assert toggle_flag(lost, 4, 4) is lost
        assert use_power_up(lost, "xray", 0) is lost
        assert use_power_up(lost, "autoflag", 0) is lost
        assert tick(lost, 1000) is lost

    def test_out_of_bounds_raises_even_after_game_over(
        self, session_factory
    ) -> None:
        """Bounds are checked even once the game is over."""
        lost = reveal(self.no_safe_click(session_factory(5, 5, WALL)), 0, 2)
        with pytest.raises(OutOfBounds):
            reveal(lost, 9, 9)


# ============================================================================
# Flag Tests
# ============================================================================

class TestToggleFlag:
    """Test flag bookkeeping."""

    def test_flag_and_unflag(self, easy_session: GameSession) -> None:
        """Toggling twice should flag then unflag and track the count."""
        flagged = toggle_flag(easy_session, 0, 0)
        assert flagged.board.get_cell(0, 0).is_flagged
        assert flagged.flagged_count == 1
        unflagged = toggle_flag(flagged, 0, 0)
        assert not unflagged.board.get_cell(0, 0).is_flagged
        assert unflagged.flagged_count == 0

    def test_flag_revealed_cell_is_noop(self, session_factory) -> None:
        """Flagging a revealed cell returns the same session."""
        session = session_factory(5, 5, WALL, revealed=[(0, 0)])
        assert toggle_flag(session, 0, 0) is session

    def test_flag_count_not_clamped(self, session_factory) -> None:
        """Flags may outnumber mines, driving the counter negative."""
        session = session_factory(3, 3, [(0, 0)])
        for position in [(0, 1), (0, 2), (1, 0)]:
            session = toggle_flag(session, *position)
        assert session.flagged_count == 3
        assert session.remaining_mines == -2

    def test_flag_out_of_bounds_raises(self, easy_session: GameSession) -> None:
        """Flagging off the board should raise OutOfBounds."""
        with pytest.raises(OutOfBounds):
            toggle_flag(easy_session, 9, 0)


# ============================================================================
# Ownership Tests
# ============================================================================

class TestSnapshotOwnership:
    """Test that transitions never touch the previous snapshot."""

    def test_reveal_leaves_prior_snapshot(self, easy_session: GameSession) -> None:
        """Revealing should not alter the previous snapshot."""
        played = reveal(easy_session, 4, 4, rng=np.random.default_rng(5))
        assert played.board is not easy_session.board
        assert easy_session.board.count_revealed() == 0
        assert easy_session.board.count_mines() == 0
        assert easy_session.mines_placed is False

    def test_flag_leaves_prior_snapshot(self, easy_session: GameSession) -> None:
        """Flagging should not alter the previous snapshot."""
        flagged = toggle_flag(easy_session, 1, 1)
        assert flagged.board is not easy_session.board
        assert easy_session.board.get_cell(1, 1).is_hidden

    def test_snapshots_share_no_cells(self, session_factory) -> None:
        """Consecutive snapshots should not share cell objects."""
        session = session_factory(5, 5, WALL)
        played = reveal(session, 0, 0)
        before = {id(cell) for cell in session.board.cells()}
        after = {id(cell) for cell in played.board.cells()}
        assert not before & after
