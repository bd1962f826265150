"""Pure board operations.

Every function takes a :class:`Board` and returns a new one; the input is never
modified, so a caller that catches an error still holds a valid board.
"""

from __future__ import annotations

from ..config import SEED_TASKS, BoardConfig
from ..domain.models import Board, Column, Task, new_task_id
from ..errors import NotFoundError, OutOfRangeError, ValidationError


def default_board(config: BoardConfig) -> Board:
    """Return the board used when nothing has been persisted yet."""
    columns: list[Column] = []
    taken: list[str] = []
    for spec in config.columns:
        tasks: list[Task] = []
        if config.seed_tasks:
            for title, description in SEED_TASKS.get(spec.id, ()):
                task = Task(id=new_task_id(taken), title=title, description=description)
                taken.append(task.id)
                tasks.append(task)
        columns.append(Column(id=spec.id, title=spec.title, tasks=tuple(tasks)))
    return Board(columns=tuple(columns))


def validate_board(board: Board) -> None:
    """Raise :class:`ValidationError` if *board* breaks an id invariant."""
    column_ids: set[str] = set()
    task_ids: set[str] = set()
    for col in board.columns:
        if not col.id.strip():
            raise ValidationError("Column id must not be blank")
        if col.id in column_ids:
            raise ValidationError(f"Duplicate column id: {col.id}")
        column_ids.add(col.id)
        for task in col.tasks:
            if not task.id.strip():
                raise ValidationError(f"Task with blank id in column {col.id}")
            if task.id in task_ids:
                raise ValidationError(f"Duplicate task id: {task.id}")
            task_ids.add(task.id)


def _require_column(board: Board, column_id: str) -> Column:
    col = board.column(column_id)
    if col is None:
        raise NotFoundError(f"Column not found: {column_id}")
    return col


def _require_title(title: str) -> None:
    if not title or not title.strip():
        raise ValidationError("Task title must not be empty")


def add_task(board: Board, column_id: str, title: str, description: str = "") -> Board:
    _require_title(title)
    col = _require_column(board, column_id)
    task = Task(id=new_task_id(board.task_ids()), title=title, description=description or "")
    return board.with_column(col.with_tasks(col.tasks + (task,)))


def delete_task(board: Board, column_id: str, task_id: str) -> Board:
    """Remove a task. A missing column or task leaves the board as it is."""
    col = board.column(column_id)
    if col is None or col.index_of(task_id) is None:
        return board
    return board.with_column(col.with_tasks(t for t in col.tasks if t.id != task_id))


def edit_task(board: Board, column_id: str, task_id: str, new_title: str, new_description: str) -> Board:
    col = _require_column(board, column_id)
    idx = col.index_of(task_id)
    if idx is None:
        raise NotFoundError(f"Task {task_id} not found in column {column_id}")
    _require_title(new_title)
    tasks = list(col.tasks)
    tasks[idx] = Task(id=task_id, title=new_title, description=new_description or "")
    return board.with_column(col.with_tasks(tasks))


def move_task(
    board: Board,
    source_column_id: str,
    source_index: int,
    dest_column_id: str,
    dest_index: int,
) -> Board:
    """Move the task at *source_index* to *dest_index* of the destination column.

    ``dest_index`` counts positions in the destination list after the task has
    been taken out, so ``dest_index == len(list)`` appends. Source and
    destination may be the same column.
    """
    source = _require_column(board, source_column_id)
    dest = _require_column(board, dest_column_id)

    if not 0 <= source_index < len(source.tasks):
        raise OutOfRangeError(
            f"Source index {source_index} out of range for column {source_column_id} "
            f"({len(source.tasks)} tasks)"
        )

    same_column = source.id == dest.id
    remaining = list(source.tasks)
    moved = remaining.pop(source_index)
    target = remaining if same_column else list(dest.tasks)

    if not 0 <= dest_index <= len(target):
        raise OutOfRangeError(
            f"Destination index {dest_index} out of range for column {dest_column_id} "
            f"(0..{len(target)})"
        )

    if same_column and source_index == dest_index:
        return board

    target.insert(dest_index, moved)
    if same_column:
        return board.with_column(source.with_tasks(target))
    return board.with_column(source.with_tasks(remaining)).with_column(dest.with_tasks(target))


def reconcile_columns(board: Board, config: BoardConfig) -> tuple[Board, list[str]]:
    """Lay *board* out on the configured column set.

    Returns the reconciled board and a list of human-readable notes describing
    what changed (empty when the board already matched). Tasks from columns
    that are no longer configured are appended to the first configured column.

    Raises:
        ValidationError: If no columns are configured.
    """
    if not config.columns:
        raise ValidationError("No columns are configured")
    notes: list[str] = []
    by_id = {col.id: col for col in board.columns}
    columns: list[Column] = []
    for spec in config.columns:
        existing = by_id.get(spec.id)
        if existing is None:
            notes.append(f"added missing column {spec.id!r}")
            columns.append(Column(id=spec.id, title=spec.title))
            continue
        if existing.title != spec.title:
            notes.append(f"renamed column {spec.id!r} to {spec.title!r}")
        columns.append(Column(id=spec.id, title=spec.title, tasks=existing.tasks))

    configured = set(config.column_ids())
    orphans: list[Task] = []
    for col in board.columns:
        if col.id not in configured:
            notes.append(f"moved {len(col.tasks)} task(s) from unknown column {col.id!r}")
            orphans.extend(col.tasks)
    if orphans:
        first = columns[0]
        columns[0] = first.with_tasks(first.tasks + tuple(orphans))

    if [col.id for col in board.columns] != [col.id for col in columns] and not notes:
        notes.append("reordered columns")
    return Board(columns=tuple(columns)), notes
