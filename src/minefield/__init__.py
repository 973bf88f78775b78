"""
Minesweeper field module.

Provides the rules engine (cells, bomb placement, flood opening,
win/loss detection), its observer interface, and a gymnasium
environment built on top of it.
"""
from .cell import Cell, CellState
from .observer import CellData, FieldObserver, RecordingObserver
from .engine import (
    FieldConfig,
    GameState,
    Minesweeper,
    MinefieldError,
    OutOfBoundsError,
    ReentrantCommandError,
)
from .environment import MinesweeperEnv, make_vec_env

__all__ = [
    "Cell",
    "CellState",
    "CellData",
    "FieldObserver",
    "RecordingObserver",
    "FieldConfig",
    "GameState",
    "Minesweeper",
    "MinefieldError",
    "OutOfBoundsError",
    "ReentrantCommandError",
    "MinesweeperEnv",
    "make_vec_env",
]
