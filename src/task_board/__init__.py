"""Provide the public `task_board` package exports."""

from __future__ import annotations

from .domain.models import Board, Column, Task
from .engine.service import BoardService
from .errors import BoardError, BoardIOError, NotFoundError, OutOfRangeError, ValidationError

__all__ = [
    "Board",
    "Column",
    "Task",
    "BoardService",
    "BoardError",
    "BoardIOError",
    "NotFoundError",
    "OutOfRangeError",
    "ValidationError",
]
