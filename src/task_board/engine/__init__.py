"""Board engine: pure board operations and the service that persists them."""

from .operations import add_task, default_board, delete_task, edit_task, move_task, validate_board
from .service import BoardService, create_board_service

__all__ = [
    "BoardService",
    "create_board_service",
    "add_task",
    "default_board",
    "delete_task",
    "edit_task",
    "move_task",
    "validate_board",
]
