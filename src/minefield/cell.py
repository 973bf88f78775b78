"""
Cell module for the Minesweeper field.

Represents individual cells of the field with their visible state
and whether they hold a bomb.
"""
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Tuple


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible visible states of a cell."""

    INITIAL = auto()
    OPENED = auto()
    MARKED_AS_BOMB = auto()
    DEFUSED = auto()
    DETONATED = auto()


_OPENABLE = (CellState.INITIAL, CellState.MARKED_AS_BOMB)
_RESOLVED = (CellState.OPENED, CellState.DEFUSED, CellState.DETONATED)


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    Represents a single cell of the Minesweeper field.

    Every state-changing method returns True if a transition happened
    and False otherwise. None of them raise.

    Attributes:
        position: (row, col) of the cell, fixed once placed on the grid.
        state: Current visible state.

    Whether the cell holds a bomb is read through ``has_bomb`` and
    changed only by ``arm`` (while INITIAL) and ``clear``.
    """

    position: Tuple[int, int] = (0, 0)
    state: CellState = CellState.INITIAL
    _has_bomb: bool = field(default=False, repr=False)

    @property
    def has_bomb(self) -> bool:
        """Check if cell holds a bomb."""
        return self._has_bomb

    def open_or_detonate(self) -> bool:
        """Open the cell, or detonate it if it holds a bomb."""
        return self._open_or(CellState.DETONATED)

    def open_or_defuse(self) -> bool:
        """Open the cell, or defuse it if it holds a bomb."""
        return self._open_or(CellState.DEFUSED)

    def toggle_bomb_mark(self) -> bool:
        """
        Turn the bomb mark on or off.

        A mark is only the player's assumption; it says nothing about
        whether a bomb is really there.

        Returns:
            True if the mark was toggled, False if the cell is resolved.
        """
        if self.state == CellState.INITIAL:
            self.state = CellState.MARKED_AS_BOMB
        elif self.state == CellState.MARKED_AS_BOMB:
            self.state = CellState.INITIAL
        else:
            return False
        return True

    def arm(self, has_bomb: bool = True) -> bool:
        """
        Put a bomb into (or take it out of) an untouched cell.

        Returns:
            True if the bomb flag changed, False if it already had that
            value or the cell is no longer INITIAL.
        """
        if self.state != CellState.INITIAL or self._has_bomb == has_bomb:
            return False
        self._has_bomb = has_bomb
        return True

    def clear(self) -> bool:
        """
        Remove the bomb and return the cell to INITIAL.

        Returns:
            True if the state changed, False if it was already INITIAL.
        """
        self._has_bomb = False
        if self.state == CellState.INITIAL:
            return False
        self.state = CellState.INITIAL
        return True

    def _open_or(self, bomb_state: CellState) -> bool:
        if self.state not in _OPENABLE:
            return False
        self.state = bomb_state if self.has_bomb else CellState.OPENED
        return True

    @property
    def is_initial(self) -> bool:
        """Check if cell is untouched."""
        return self.state == CellState.INITIAL

    @property
    def is_marked(self) -> bool:
        """Check if cell is marked as a bomb."""
        return self.state == CellState.MARKED_AS_BOMB

    @property
    def is_opened(self) -> bool:
        """Check if cell is opened."""
        return self.state == CellState.OPENED

    @property
    def is_resolved(self) -> bool:
        """Check if cell reached a terminal state for this round."""
        return self.state in _RESOLVED
