"""
Pytest configuration and shared fixtures.
"""
import random
import sys
from pathlib import Path
from typing import Callable, Iterable, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import Cell, FieldConfig, Minesweeper, RecordingObserver


# ============================================================================
# Field Fixtures
# ============================================================================

@pytest.fixture
def recorder() -> RecordingObserver:
    """Create an observer that records every notification."""
    return RecordingObserver()


@pytest.fixture
def default_field() -> Minesweeper:
    """Create a default 9x9 field with 10 bombs."""
    return Minesweeper(rng=random.Random(7))


@pytest.fixture
def empty_field() -> Minesweeper:
    """Create a field with no bombs for flood testing."""
    return Minesweeper(FieldConfig(5, 0))


@pytest.fixture
def rigged_field() -> Callable[..., Minesweeper]:
    """
    Factory for fields with bombs at chosen positions.

    The field is created empty and the bombs are armed while every
    cell is still INITIAL, so the layout skips the solvability check.
    """
    def make(size: int, bombs: Iterable[Tuple[int, int]]) -> Minesweeper:
        field = Minesweeper(FieldConfig(size, 0))
        for row, col in bombs:
            field.get_cell(row, col).arm()
        return field

    return make


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def initial_cell() -> Cell:
    """Create an untouched cell."""
    return Cell()


@pytest.fixture
def bomb_cell() -> Cell:
    """Create a cell holding a bomb."""
    cell = Cell()
    cell.arm()
    return cell
