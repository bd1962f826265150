from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from ..errors import ValidationError


def _id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def new_task_id(existing: Iterable[str] = ()) -> str:
    """Return a fresh task id that does not collide with any id in *existing*."""
    taken = set(existing)
    candidate = _id("task")
    while candidate in taken:
        candidate = _id("task")
    return candidate


@dataclass(frozen=True)
class Task:
    id: str = field(default_factory=lambda: _id("task"))
    title: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        return cls(
            id=str(data.get("id") or _id("task")),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Column:
    id: str
    title: str = ""
    tasks: tuple[Task, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.tasks, tuple):
            object.__setattr__(self, "tasks", tuple(self.tasks))

    def index_of(self, task_id: str) -> Optional[int]:
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                return idx
        return None

    def with_tasks(self, tasks: Iterable[Task]) -> "Column":
        return replace(self, tasks=tuple(tasks))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Column":
        column_id = str(data.get("id") or "")
        if not column_id.strip():
            raise ValidationError("Column is missing an id")
        raw_tasks = data.get("tasks") or []
        if not isinstance(raw_tasks, list):
            raise ValidationError(f"Column {column_id}: tasks must be a list")
        tasks = []
        for item in raw_tasks:
            if not isinstance(item, dict):
                raise ValidationError(f"Column {column_id}: task entries must be objects")
            tasks.append(Task.from_dict(item))
        return cls(id=column_id, title=str(data.get("title") or ""), tasks=tuple(tasks))


@dataclass(frozen=True)
class Board:
    """Root aggregate of the task board and the unit of persistence.

    Instances are immutable: operations return a new ``Board`` and leave the
    previous value valid, so a failed operation never needs a rollback.
    """

    columns: tuple[Column, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))

    # -- queries ------------------------------------------------------------

    def column(self, column_id: str) -> Optional[Column]:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def column_ids(self) -> list[str]:
        return [col.id for col in self.columns]

    def find_task(self, task_id: str) -> Optional[tuple[Column, int, Task]]:
        for col in self.columns:
            idx = col.index_of(task_id)
            if idx is not None:
                return col, idx, col.tasks[idx]
        return None

    def task_ids(self) -> list[str]:
        return [task.id for col in self.columns for task in col.tasks]

    def task_count(self) -> int:
        return sum(len(col.tasks) for col in self.columns)

    # -- copy-on-write helpers ----------------------------------------------

    def with_column(self, column: Column) -> "Board":
        """Return a board with the column sharing *column*'s id swapped in."""
        return Board(columns=tuple(column if col.id == column.id else col for col in self.columns))

    # -- serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"columns": [col.to_dict() for col in self.columns]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Board":
        if not isinstance(data, dict):
            raise ValidationError(f"Board payload must be an object, got {type(data).__name__}")
        raw_columns = data.get("columns")
        if not isinstance(raw_columns, list):
            raise ValidationError("Board payload is missing a 'columns' list")
        columns = []
        for item in raw_columns:
            if not isinstance(item, dict):
                raise ValidationError("Column entries must be objects")
            columns.append(Column.from_dict(item))
        return cls(columns=tuple(columns))
