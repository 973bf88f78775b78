"""
Observer interface for Minesweeper field notifications.

Defines what an external collaborator (a display, an RL environment,
a test) receives from the engine.
"""
from abc import ABC
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from .cell import CellState

if TYPE_CHECKING:
    from .engine import GameState


# ============================================================================
# Notification Payload
# ============================================================================

@dataclass(frozen=True)
class CellData:
    """
    Visible data of a cell after a state change.

    Attributes:
        state: New state of the cell.
        number_bombs: Count of bombs around the cell when it is OPENED,
            None otherwise.
    """

    state: CellState
    number_bombs: Optional[int] = None


# ============================================================================
# Observer Interface
# ============================================================================

class FieldObserver(ABC):
    """
    Base class for receivers of field notifications.

    Notifications are delivered synchronously, once per actual
    transition, in the order the transitions happen. Both hooks are
    no-ops by default so subclasses override only what they need.

    An observer must not issue engine commands from inside a hook; the
    engine rejects that with ``ReentrantCommandError``.
    """

    def on_cell_state_changed(self, row: int, col: int, data: CellData) -> None:
        """
        Called after a cell changed its state.

        Args:
            row: Row of the cell.
            col: Column of the cell.
            data: New visible data of the cell.
        """
        pass

    def on_game_state_changed(self, state: "GameState") -> None:
        """
        Called after the game changed its state.

        Args:
            state: New game state.
        """
        pass


# ============================================================================
# Recording Observer
# ============================================================================

@dataclass(eq=False)
class RecordingObserver(FieldObserver):
    """Observer that keeps every notification it receives."""

    cell_changes: List[Tuple[int, int, CellData]] = field(default_factory=list)
    game_states: List["GameState"] = field(default_factory=list)

    def on_cell_state_changed(self, row: int, col: int, data: CellData) -> None:
        self.cell_changes.append((row, col, data))

    def on_game_state_changed(self, state: "GameState") -> None:
        self.game_states.append(state)

    def count(self, state: CellState) -> int:
        """Count recorded cell transitions into the given state."""
        return sum(1 for _, _, data in self.cell_changes if data.state == state)

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.cell_changes.clear()
        self.game_states.clear()
