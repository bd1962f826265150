"""Tests for the storage adapters (storage/file_gateway.py)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from task_board.config import BoardConfig
from task_board.domain.models import Board, Column, Task
from task_board.engine.operations import default_board
from task_board.errors import BoardIOError
from task_board.storage.file_gateway import FileBoardGateway, MemoryBoardGateway


@pytest.fixture
def board() -> Board:
    return Board(
        columns=(
            Column("todo", "To Do", (Task(id="t1", title="One", description="first"), Task(id="t2", title="Two"))),
            Column("in-progress", "In Progress"),
            Column("done", "Done", (Task(id="t3", title="Three", description="ünïcode"),)),
        )
    )


class TestFileBoardGateway:
    def test_missing_file_is_not_found(self, tmp_path: Path) -> None:
        gw = FileBoardGateway(tmp_path / "tasks.json")
        assert gw.load() is None

    def test_json_save_and_load(self, tmp_path: Path, board: Board) -> None:
        path = tmp_path / "state" / "tasks.json"
        gw = FileBoardGateway(path)
        gw.save(board)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["version"] == 1
        assert [c["id"] for c in raw["columns"]] == ["todo", "in-progress", "done"]
        assert [t["id"] for t in raw["columns"][0]["tasks"]] == ["t1", "t2"]
        assert path.read_text(encoding="utf-8").startswith("{\n  ")
        assert gw.load() == board

    def test_yaml_save_and_load(self, tmp_path: Path, board: Board) -> None:
        path = tmp_path / "board.yaml"
        gw = FileBoardGateway(path, tmp_path / "board.lock")
        gw.save(board)

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert raw["columns"][2]["tasks"][0]["description"] == "ünïcode"
        assert gw.load() == board

    def test_save_replaces_whole_board(self, tmp_path: Path, board: Board) -> None:
        gw = FileBoardGateway(tmp_path / "tasks.json")
        gw.save(board)
        empty = default_board(BoardConfig())
        gw.save(empty)
        assert gw.load() == empty

    def test_no_temp_file_left_behind(self, tmp_path: Path, board: Board) -> None:
        gw = FileBoardGateway(tmp_path / "tasks.json")
        gw.save(board)
        assert not list(tmp_path.glob("*.tmp"))

    def test_corrupt_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(BoardIOError, match="JSONDecodeError"):
            FileBoardGateway(path).load()

    def test_wrong_shape_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({"todo": [], "done": []}), encoding="utf-8")
        with pytest.raises(BoardIOError, match="columns"):
            FileBoardGateway(path).load()

    def test_non_object_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(BoardIOError, match="expected object"):
            FileBoardGateway(path).load()

    def test_unwritable_target_raises(self, tmp_path: Path, board: Board) -> None:
        target = tmp_path / "tasks.json"
        target.mkdir()
        with pytest.raises(BoardIOError):
            FileBoardGateway(target, tmp_path / "tasks.lock").save(board)

    def test_quarantine_moves_file_aside(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text("{not json", encoding="utf-8")
        gw = FileBoardGateway(path)

        moved_to = gw.quarantine()

        assert moved_to is not None
        backup = Path(moved_to)
        assert backup.name.startswith("tasks.json.corrupt-")
        assert backup.read_text(encoding="utf-8") == "{not json"
        assert not path.exists()
        assert gw.load() is None

    def test_quarantine_keeps_earlier_backups(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        gw = FileBoardGateway(path)
        for text in ("first", "second"):
            path.write_text(text, encoding="utf-8")
            gw.quarantine()
        backups = sorted(p.read_text(encoding="utf-8") for p in tmp_path.glob("tasks.json.corrupt-*"))
        assert backups == ["first", "second"]

    def test_quarantine_without_file(self, tmp_path: Path) -> None:
        assert FileBoardGateway(tmp_path / "tasks.json").quarantine() is None

    def test_reads_payload_written_by_other_tools(self, tmp_path: Path) -> None:
        payload = {
            "columns": [
                {
                    "title": "To Do",
                    "id": "todo",
                    "tasks": [{"description": "Create a board", "title": "Build", "id": "task-2"}],
                }
            ]
        }
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        board = FileBoardGateway(path).load()
        assert board is not None
        assert board.to_dict() == payload


class TestMemoryBoardGateway:
    def test_round_trip(self, board: Board) -> None:
        gw = MemoryBoardGateway()
        assert gw.load() is None
        gw.save(board)
        assert gw.load() == board
        assert gw.save_count == 1

    def test_payload_is_a_copy(self, board: Board) -> None:
        gw = MemoryBoardGateway()
        gw.save(board)
        gw.payload["columns"].clear()
        assert gw.load() == board

    def test_invalid_payload_raises(self) -> None:
        with pytest.raises(BoardIOError):
            MemoryBoardGateway({"columns": None}).load()

    def test_quarantine_keeps_payload(self, board: Board) -> None:
        gw = MemoryBoardGateway()
        assert gw.quarantine() is None
        gw.save(board)
        gw.quarantine()
        assert gw.load() is None
        assert Board.from_dict(gw.quarantined[0]) == board
