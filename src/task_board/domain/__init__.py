from .models import Board, Column, Task, new_task_id

__all__ = [
    "Board",
    "Column",
    "Task",
    "new_task_id",
]
