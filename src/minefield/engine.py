"""
Engine module for the Minesweeper field.

Implements the field with solvable bomb placement, flood opening,
bomb marking, and win/loss resolution. State changes are reported
to registered observers.
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .cell import Cell, CellState
from .observer import CellData, FieldObserver

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class GameState(Enum):
    """Possible states of the game."""

    INITIATED = auto()
    READY = auto()
    RUNNING = auto()
    WIN = auto()
    LOSS = auto()


# Observation codes for cells that are not OPENED
UNOPENED = -1
MARKED = -2
DETONATED = 9
DEFUSED = 10


# ============================================================================
# Errors
# ============================================================================

class MinefieldError(Exception):
    """Base class for engine errors."""


class OutOfBoundsError(MinefieldError, IndexError):
    """Raised for coordinates outside the field."""

    def __init__(self, row: int, col: int, size: int) -> None:
        super().__init__(f"No cell at ({row}, {col}) on a {size}x{size} field")
        self.row = row
        self.col = col


class ReentrantCommandError(MinefieldError, RuntimeError):
    """Raised when a command is issued while another one is running."""


# ============================================================================
# Configuration
# ============================================================================

@dataclass(frozen=True)
class FieldConfig:
    """
    Configuration for a Minesweeper field.

    Immutable once created; the engine keeps it for its whole lifetime.

    A bomb count too large for the field is accepted: placement then
    stops after ``max_failed_attempts`` rejected attempts and the field
    holds fewer bombs than requested.

    Attributes:
        size: Number of rows and columns.
        bomb_count: Number of bombs to place.
    """

    size: int = 9
    bomb_count: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.size < 1:
            raise ValueError("Field size must be positive")
        if self.bomb_count < 0:
            raise ValueError("Number of bombs cannot be negative")

    @property
    def max_failed_attempts(self) -> int:
        """Rejected placement attempts allowed before giving up."""
        return self.size * self.size


# ============================================================================
# Field Engine
# ============================================================================

class Minesweeper:
    """
    Minesweeper field engine.

    Owns a size x size grid of cells. Commands issued in a state where
    they make no sense (before READY, after WIN or LOSS) are silently
    ignored. Coordinates outside the grid raise ``OutOfBoundsError``.

    The engine is single-threaded and not reentrant: observers must
    not issue commands from inside a notification.
    """

    def __init__(
        self,
        config: Optional[FieldConfig] = None,
        observers: Iterable[FieldObserver] = (),
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Create the grid and place the bombs.

        Args:
            config: Field configuration (default: 9x9 with 10 bombs).
            observers: Observers registered before placement, so they
                also receive the first READY notification.
            rng: Random generator used for bomb placement.
        """
        self.config = config or FieldConfig()
        self._rng = rng or random.Random()
        self._observers: List[FieldObserver] = list(observers)
        self._state = GameState.INITIATED
        self._busy = False
        self._grid = [
            [Cell(position=(row, col)) for col in range(self.size)]
            for row in range(self.size)
        ]
        self._run(self._set_bombs_on_field)

    # ========================================================================
    # Observers
    # ========================================================================

    def subscribe(self, observer: FieldObserver) -> None:
        """Register an observer for cell and game notifications."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: FieldObserver) -> None:
        """Remove a previously registered observer."""
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_cell_state_changed(self, cell: Cell) -> None:
        row, col = cell.position
        data = self._get_cell_data(cell)
        for observer in list(self._observers):
            observer.on_cell_state_changed(row, col, data)

    def _notify_game_state_changed(self) -> None:
        for observer in list(self._observers):
            observer.on_game_state_changed(self._state)

    # ========================================================================
    # Commands
    # ========================================================================

    def open_cell(self, row: int, col: int) -> None:
        """
        Open the cell at the given position.

        Starts the game if it is READY. Opening a cell without bombs
        around it opens its neighbors as well; opening a bomb loses
        the game.

        Args:
            row: Row index.
            col: Column index.
        """
        cell = self.get_cell(row, col)
        self._run(self._open_cell_command, cell)

    def toggle_cell_bomb_mark(self, row: int, col: int) -> None:
        """
        Switch the bomb mark on the cell at the given position.

        Starts the game if it is READY.

        Args:
            row: Row index.
            col: Column index.
        """
        cell = self.get_cell(row, col)
        self._run(self._toggle_mark_command, cell)

    def restart_game(self) -> None:
        """
        Clear the field and place a fresh set of bombs.

        Every cell that was not INITIAL is reported as it is cleared.
        Observers are told the game is READY only when the state actually
        changes: a restart issued while READY sends no game notification.
        """
        self._run(self._set_bombs_on_field)

    def _run(self, command, *args) -> None:
        if self._busy:
            raise ReentrantCommandError(
                "Commands cannot be issued while another command is running"
            )
        self._busy = True
        try:
            command(*args)
        finally:
            self._busy = False

    def _open_cell_command(self, cell: Cell) -> None:
        if not self._start_game_if_needed():
            return
        self._open_cell(cell)
        self._set_win_if_needed()

    def _toggle_mark_command(self, cell: Cell) -> None:
        if not self._start_game_if_needed():
            return
        if cell.toggle_bomb_mark():
            self._notify_cell_state_changed(cell)
            self._set_win_if_needed()

    # ========================================================================
    # Bomb Placement
    # ========================================================================

    def _set_bombs_on_field(self) -> None:
        """Clear all cells and try to place every bomb."""
        for cell in self.cells():
            if cell.clear():
                self._notify_cell_state_changed(cell)

        placed = 0
        failures_left = self.config.max_failed_attempts
        candidates = list(self.cells())

        while placed < self.config.bomb_count and failures_left and candidates:
            index = self._rng.randrange(len(candidates))
            cell = candidates[index]

            # Fake bomb, kept only if nobody ends up walled in by bombs
            cell.arm()
            if self._surrounded_by_bombs(cell) or any(
                self._surrounded_by_bombs(neighbor)
                for neighbor in self._adjacent_cells(cell)
            ):
                cell.arm(False)
                failures_left -= 1
                continue

            candidates[index] = candidates[-1]
            candidates.pop()
            placed += 1

        if placed < self.config.bomb_count:
            logger.warning(
                "Placed %d of %d bombs on a %dx%d field",
                placed, self.config.bomb_count, self.size, self.size,
            )
        else:
            logger.debug(
                "Placed %d bombs with %d failed attempts",
                placed, self.config.max_failed_attempts - failures_left,
            )

        self._set_game_state(GameState.READY)

    def _surrounded_by_bombs(self, cell: Cell) -> bool:
        """Check if every neighbor of the cell holds a bomb."""
        return all(neighbor.has_bomb for neighbor in self._adjacent_cells(cell))

    # ========================================================================
    # Opening
    # ========================================================================

    def _open_cell(self, start: Cell) -> None:
        """Open a cell and flood through neighbors without bombs around."""
        pending = [start]
        while pending:
            cell = pending.pop()
            if not cell.open_or_detonate():
                continue

            self._notify_cell_state_changed(cell)

            if cell.state == CellState.DETONATED:
                self._set_loss()
                return

            if self._count_adjacent_bombs(cell) == 0:
                pending.extend(reversed(self._adjacent_cells(cell)))

    # ========================================================================
    # Game End
    # ========================================================================

    def _set_win_if_needed(self) -> None:
        """
        Finish the game as won when nothing is left to do.

        The game is won when no cell is INITIAL and no cell is marked
        without a bomb. All bombs are then defused.
        """
        if self._state != GameState.RUNNING:
            return

        for cell in self.cells():
            if cell.is_initial or (cell.is_marked and not cell.has_bomb):
                return

        for cell in self.cells():
            if cell.open_or_defuse():
                self._notify_cell_state_changed(cell)
        self._set_game_state(GameState.WIN)

    def _set_loss(self) -> None:
        """Open every cell, detonate every bomb, and lose the game."""
        for cell in self.cells():
            if cell.open_or_detonate():
                self._notify_cell_state_changed(cell)
        self._set_game_state(GameState.LOSS)

    def _start_game_if_needed(self) -> bool:
        """Start a READY game; report whether the game is running."""
        if self._state == GameState.READY:
            self._set_game_state(GameState.RUNNING)
        return self._state == GameState.RUNNING

    def _set_game_state(self, state: GameState) -> None:
        if state == self._state:
            return
        logger.debug("Game state %s -> %s", self._state.name, state.name)
        self._state = state
        self._notify_game_state_changed()

    # ========================================================================
    # Grid Utilities
    # ========================================================================

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within field bounds."""
        return 0 <= row < self.size and 0 <= col < self.size

    def neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """
        Get positions of the 8-neighborhood, clipped at the field edge.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples in row-major order.
        """
        if not self._is_valid_position(row, col):
            raise OutOfBoundsError(row, col, self.size)
        result = []
        for neighbor_row in range(max(row - 1, 0), min(row + 2, self.size)):
            for neighbor_col in range(max(col - 1, 0), min(col + 2, self.size)):
                if (neighbor_row, neighbor_col) != (row, col):
                    result.append((neighbor_row, neighbor_col))
        return result

    def _adjacent_cells(self, cell: Cell) -> List[Cell]:
        return [self._grid[row][col] for row, col in self.neighbors(*cell.position)]

    def _count_adjacent_bombs(self, cell: Cell) -> int:
        return sum(1 for neighbor in self._adjacent_cells(cell) if neighbor.has_bomb)

    def _get_cell_data(self, cell: Cell) -> CellData:
        if cell.state == CellState.OPENED:
            return CellData(cell.state, self._count_adjacent_bombs(cell))
        return CellData(cell.state)

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def state(self) -> GameState:
        """Get current game state."""
        return self._state

    @property
    def size(self) -> int:
        """Number of rows and columns."""
        return self.config.size

    @property
    def bomb_count(self) -> int:
        """Number of bombs requested by the configuration."""
        return self.config.bomb_count

    @property
    def placed_bombs(self) -> int:
        """Number of bombs actually on the field."""
        return sum(1 for cell in self.cells() if cell.has_bomb)

    def cells(self) -> Iterator[Cell]:
        """Iterate over all cells in row-major order."""
        for row in self._grid:
            yield from row

    def get_cell(self, row: int, col: int) -> Cell:
        """
        Get cell at position; raises OutOfBoundsError if invalid.

        The cell is the live one owned by the engine. Treat it as a
        read-only view: changing it directly bypasses notifications
        and win detection.
        """
        if not self._is_valid_position(row, col):
            raise OutOfBoundsError(row, col, self.size)
        return self._grid[row][col]

    def cell_data(self, row: int, col: int) -> CellData:
        """Get the visible data of the cell at position."""
        return self._get_cell_data(self.get_cell(row, col))

    def count_adjacent_bombs(self, row: int, col: int) -> int:
        """Count bombs in the 8-neighborhood of a position."""
        return self._count_adjacent_bombs(self.get_cell(row, col))

    def get_observation(self) -> np.ndarray:
        """
        Get the visible field as a numpy array.

        Returns:
            2D int8 array where:
                -1 = INITIAL
                -2 = MARKED_AS_BOMB
                0-8 = OPENED with adjacent bomb count
                9 = DETONATED
                10 = DEFUSED
        """
        obs = np.full((self.size, self.size), UNOPENED, dtype=np.int8)
        for cell in self.cells():
            row, col = cell.position
            if cell.state == CellState.OPENED:
                obs[row, col] = self._count_adjacent_bombs(cell)
            elif cell.state == CellState.MARKED_AS_BOMB:
                obs[row, col] = MARKED
            elif cell.state == CellState.DETONATED:
                obs[row, col] = DETONATED
            elif cell.state == CellState.DEFUSED:
                obs[row, col] = DEFUSED
        return obs
