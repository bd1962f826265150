"""Load the board configuration from `.task_board/config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .io_utils import _load_data_with_error

STATE_DIR_NAME = ".task_board"
CONFIG_FILE = "config.yaml"
SCHEMA_VERSION = 1
DEFAULT_STORAGE_FILE = "tasks.json"


@dataclass(frozen=True)
class ColumnSpec:
    id: str
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "title": self.title}


DEFAULT_COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("todo", "To Do"),
    ColumnSpec("in-progress", "In Progress"),
    ColumnSpec("done", "Done"),
)

# Sample tasks placed on a fresh board when `seed_tasks` is enabled.
SEED_TASKS: dict[str, tuple[tuple[str, str], ...]] = {
    "todo": (
        ("Learn the board", "Add, edit and delete a few tasks"),
        ("Plan the week", "Drag tasks between columns to track progress"),
    ),
    "in-progress": (
        ("Try drag and drop", "Reorder tasks within a column"),
    ),
    "done": (
        ("Set up the board", "Start the application for the first time"),
    ),
}


@dataclass(frozen=True)
class BoardConfig:
    """Immutable settings established once at startup."""

    columns: tuple[ColumnSpec, ...] = DEFAULT_COLUMNS
    storage_path: str = DEFAULT_STORAGE_FILE
    background_saves: bool = True
    seed_tasks: bool = False

    def column_ids(self) -> list[str]:
        return [spec.id for spec in self.columns]

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "columns": [spec.to_dict() for spec in self.columns],
            "storage": {"path": self.storage_path},
            "persistence": {"background": self.background_saves},
            "seed_tasks": self.seed_tasks,
        }


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def parse_columns(raw: Any) -> tuple[ColumnSpec, ...]:
    """Parse the `columns` block into column specs.

    Args:
        raw: Value of the `columns` key.

    Returns:
        The configured column specs, in order.

    Raises:
        ValueError: If the block is empty, malformed, or repeats an id.
    """
    if not isinstance(raw, list) or not raw:
        raise ValueError("columns: expected a non-empty list")
    specs: list[ColumnSpec] = []
    seen: set[str] = set()
    for entry in raw:
        if isinstance(entry, str):
            column_id, title = entry.strip(), entry.strip()
        elif isinstance(entry, dict):
            column_id = str(entry.get("id") or "").strip()
            title = str(entry.get("title") or column_id)
        else:
            raise ValueError(f"columns: unexpected entry {entry!r}")
        if not column_id:
            raise ValueError("columns: every column needs an id")
        if column_id in seen:
            raise ValueError(f"columns: duplicate id {column_id!r}")
        seen.add(column_id)
        specs.append(ColumnSpec(column_id, title))
    return tuple(specs)


def config_from_dict(data: dict[str, Any]) -> BoardConfig:
    """Build a :class:`BoardConfig` from a parsed config mapping.

    Missing keys fall back to defaults.

    Raises:
        ValueError: If a present value is invalid.
    """
    columns = parse_columns(data["columns"]) if "columns" in data else DEFAULT_COLUMNS

    storage_path = _get_nested(data, "storage", "path")
    if storage_path is None:
        storage_path = DEFAULT_STORAGE_FILE
    if not isinstance(storage_path, str) or not storage_path.strip():
        raise ValueError("storage.path: expected a non-empty string")

    background = _get_nested(data, "persistence", "background")
    if background is None:
        background = True
    if not isinstance(background, bool):
        raise ValueError("persistence.background: expected true or false")

    seed_tasks = data.get("seed_tasks", False)
    if not isinstance(seed_tasks, bool):
        raise ValueError("seed_tasks: expected true or false")

    return BoardConfig(
        columns=columns,
        storage_path=storage_path.strip(),
        background_saves=background,
        seed_tasks=seed_tasks,
    )


def load_board_config(state_root: Path) -> tuple[BoardConfig, str | None]:
    """Load the board config file.

    Args:
        state_root: The `.task_board/` directory.

    Returns:
        A tuple of `(config, error_message)`. A missing file yields the defaults
        and no error; an unreadable or invalid file yields the defaults and the
        error text.
    """
    path = state_root / CONFIG_FILE
    data, err = _load_data_with_error(path, {})
    if err:
        return BoardConfig(), err
    try:
        return config_from_dict(data), None
    except ValueError as exc:
        return BoardConfig(), f"{path.name}: {exc}"
