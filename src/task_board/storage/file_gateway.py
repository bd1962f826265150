from __future__ import annotations

import copy
import threading
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock, Timeout

from ..domain.models import Board
from ..errors import BoardError, BoardIOError
from ..io_utils import _load_data_with_error, _save_data
from ..utils import _utc_stamp
from .interfaces import BoardGateway

PAYLOAD_VERSION = 1


def _payload(board: Board) -> dict[str, Any]:
    return {"version": PAYLOAD_VERSION, **board.to_dict()}


class FileBoardGateway(BoardGateway):
    """Store the board in a JSON or YAML file, chosen by the file suffix."""

    def __init__(self, path: Path, lock_path: Optional[Path] = None, *, lock_timeout: float = 30.0) -> None:
        self._path = path
        self._lock = FileLock(str(lock_path or path.with_suffix(f"{path.suffix}.lock")), timeout=lock_timeout)
        self._thread_lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[Board]:
        try:
            with self._thread_lock:
                with self._lock:
                    if not self._path.exists():
                        return None
                    data, err = _load_data_with_error(self._path, {})
        except Timeout as exc:
            raise BoardIOError(f"Timed out waiting for {exc.lock_file}") from exc
        except OSError as exc:
            raise BoardIOError(f"{self._path.name}: {exc.__class__.__name__}: {exc}") from exc
        if err:
            raise BoardIOError(err)
        try:
            return Board.from_dict(data)
        except BoardError as exc:
            raise BoardIOError(f"{self._path.name}: {exc}") from exc

    def save(self, board: Board) -> None:
        try:
            with self._thread_lock:
                with self._lock:
                    _save_data(self._path, _payload(board))
        except Timeout as exc:
            raise BoardIOError(f"Timed out waiting for {exc.lock_file}") from exc
        except OSError as exc:
            raise BoardIOError(f"{self._path.name}: {exc.__class__.__name__}: {exc}") from exc

    def quarantine(self) -> Optional[str]:
        """Rename the board file to `<name>.corrupt-<stamp>` and return the new path."""
        try:
            with self._thread_lock:
                with self._lock:
                    if not self._path.exists():
                        return None
                    stamp = _utc_stamp()
                    target = self._path.with_name(f"{self._path.name}.corrupt-{stamp}")
                    n = 1
                    while target.exists():
                        target = self._path.with_name(f"{self._path.name}.corrupt-{stamp}-{n}")
                        n += 1
                    self._path.rename(target)
        except Timeout as exc:
            raise BoardIOError(f"Timed out waiting for {exc.lock_file}") from exc
        except OSError as exc:
            raise BoardIOError(f"{self._path.name}: {exc.__class__.__name__}: {exc}") from exc
        return str(target)


class MemoryBoardGateway(BoardGateway):
    """Keep the serialized board in memory.

    Useful for tests and for hosts that persist the payload themselves via
    :attr:`payload`.
    """

    def __init__(self, payload: Optional[dict[str, Any]] = None) -> None:
        self._payload = copy.deepcopy(payload) if payload is not None else None
        self._lock = threading.Lock()
        self.save_count = 0
        self.quarantined: list[dict[str, Any]] = []

    @property
    def payload(self) -> Optional[dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._payload)

    def load(self) -> Optional[Board]:
        with self._lock:
            if self._payload is None:
                return None
            data = copy.deepcopy(self._payload)
        try:
            return Board.from_dict(data)
        except BoardError as exc:
            raise BoardIOError(str(exc)) from exc

    def save(self, board: Board) -> None:
        with self._lock:
            self._payload = _payload(board)
            self.save_count += 1

    def quarantine(self) -> Optional[str]:
        with self._lock:
            if self._payload is None:
                return None
            self.quarantined.append(self._payload)
            self._payload = None
            return f"quarantined[{len(self.quarantined) - 1}]"
