"""Board service: owns the current board and persists it after every mutation.

Mutations run under one lock, so each applies to the latest board and its save
is queued in mutation order. Saves run on a single worker thread. While a save
is in flight only the newest pending board is kept. A failed save is reported
on the event bus and never undoes the in-memory change. A stored board that
cannot be used is set aside by the gateway before the default board replaces it.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Union

from loguru import logger

from ..config import BoardConfig
from ..domain.models import Board
from ..errors import BoardIOError, ValidationError
from ..events.bus import EventBus
from ..storage.container import BoardContainer
from ..storage.interfaces import BoardGateway
from . import operations

PERSISTENCE_CHANNEL = "persistence"
BOARD_CHANNEL = "board"
BOARD_ENTITY = "board"


class BoardService:
    def __init__(
        self,
        gateway: BoardGateway,
        config: Optional[BoardConfig] = None,
        bus: Optional[EventBus] = None,
        *,
        background_saves: Optional[bool] = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or BoardConfig()
        if not self.config.columns:
            raise ValidationError("No columns are configured")
        self.bus = bus or EventBus()
        self._background = self.config.background_saves if background_saves is None else background_saves
        self._lock = threading.RLock()
        self._board = operations.default_board(self.config)
        self._initialized = False
        self._pool: ThreadPoolExecutor | None = None
        self._pending: Optional[Future] = None
        self._queued: Optional[tuple[Board, int, str]] = None
        self._draining = False
        self._save_seq = 0
        self._last_save_error: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def board(self) -> Board:
        """The current board. Never waits on persistence."""
        return self._board

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def last_save_error(self) -> Optional[str]:
        """Error text of the most recent save, or None if it succeeded."""
        return self._last_save_error

    def initialize(self) -> Board:
        """Load the persisted board, falling back to the default board.

        Never raises: load failures are logged and the default board is used.
        """
        with self._lock:
            board = self._load_or_default()
            self._board = board
            self._initialized = True
        logger.info(
            "Board ready: {} column(s), {} task(s)",
            len(board.columns),
            board.task_count(),
        )
        return board

    def _load_or_default(self) -> Board:
        try:
            loaded = self.gateway.load()
        except BoardIOError as exc:
            logger.warning("Could not load board: {}", exc)
            return self._start_over(str(exc))
        except Exception as exc:
            logger.exception("Board gateway failed during load")
            return self._start_over(str(exc) or exc.__class__.__name__)

        if loaded is None:
            logger.info("No saved board found, creating the default board")
            board = operations.default_board(self.config)
            self._enqueue_save(board, reason="initialize")
            return board

        try:
            operations.validate_board(loaded)
        except ValidationError as exc:
            logger.warning("Saved board is invalid: {}", exc)
            return self._start_over(str(exc))

        board, notes = operations.reconcile_columns(loaded, self.config)
        if notes:
            logger.warning("Saved board did not match the configured columns: {}", "; ".join(notes))
            self._enqueue_save(board, reason="reconcile")
        return board

    def _start_over(self, error: str) -> Board:
        """Set the unusable stored board aside and return the default board."""
        try:
            moved_to = self.gateway.quarantine()
        except Exception as exc:
            # The stored board stays where it is; the next save overwrites it.
            logger.error("Could not set aside the unusable board: {}", exc)
            moved_to = None
        if moved_to:
            logger.warning("Moved the unusable board to {}, starting from defaults", moved_to)
        else:
            logger.warning("Starting from the default board")
        self.bus.emit(
            channel=PERSISTENCE_CHANNEL,
            event_type="board.load_failed",
            entity_id=BOARD_ENTITY,
            payload={"error": error, "moved_to": moved_to},
        )
        return operations.default_board(self.config)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _apply(self, reason: str, op: Callable[..., Board], *args: Any) -> Board:
        with self._lock:
            board = op(self._board, *args)
            self._board = board
            self._enqueue_save(board, reason=reason)
        logger.debug("Applied {} -> {} task(s)", reason, board.task_count())
        return board

    def add_task(self, column_id: str, title: str, description: str = "") -> Board:
        return self._apply("add_task", operations.add_task, column_id, title, description)

    def delete_task(self, column_id: str, task_id: str) -> Board:
        return self._apply("delete_task", operations.delete_task, column_id, task_id)

    def edit_task(self, column_id: str, task_id: str, new_title: str, new_description: str) -> Board:
        return self._apply("edit_task", operations.edit_task, column_id, task_id, new_title, new_description)

    def move_task(self, source_column_id: str, source_index: int, dest_column_id: str, dest_index: int) -> Board:
        return self._apply(
            "move_task",
            operations.move_task,
            source_column_id,
            source_index,
            dest_column_id,
            dest_index,
        )

    def replace_board(self, board: Union[Board, dict[str, Any]]) -> Board:
        """Adopt a whole board supplied by the caller.

        The board must hold exactly the configured columns, in configured order.
        """
        candidate = Board.from_dict(board) if isinstance(board, dict) else board
        operations.validate_board(candidate)
        expected = self.config.column_ids()
        if candidate.column_ids() != expected:
            raise ValidationError(
                f"Board columns {candidate.column_ids()} do not match configured columns {expected}"
            )
        result = self._apply("replace_board", lambda _current: candidate)
        self.bus.emit(
            channel=BOARD_CHANNEL,
            event_type="board.replaced",
            entity_id=BOARD_ENTITY,
            payload={"task_count": result.task_count()},
        )
        return result

    # ------------------------------------------------------------------
    # Persistence queue
    # ------------------------------------------------------------------

    def _get_pool(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="board-save")
        return self._pool

    def _enqueue_save(self, board: Board, *, reason: str) -> None:
        # Caller holds self._lock.
        self._save_seq += 1
        seq = self._save_seq
        if not self._background:
            self._persist(board, seq, reason)
            return
        if self._queued is not None:
            logger.debug("Board save #{} superseded by #{}", self._queued[1], seq)
        self._queued = (board, seq, reason)
        if not self._draining:
            self._draining = True
            self._pending = self._get_pool().submit(self._drain)

    def _drain(self) -> None:
        while True:
            with self._lock:
                item = self._queued
                self._queued = None
                if item is None:
                    self._draining = False
                    return
            self._persist(*item)

    def _persist(self, board: Board, seq: int, reason: str) -> bool:
        try:
            self.gateway.save(board)
        except Exception as exc:
            if isinstance(exc, BoardIOError):
                logger.warning("Board save #{} after {} failed: {}", seq, reason, exc)
            else:
                logger.exception("Board gateway failed during save #{} after {}", seq, reason)
            self._last_save_error = str(exc) or exc.__class__.__name__
            self.bus.emit(
                channel=PERSISTENCE_CHANNEL,
                event_type="board.save_failed",
                entity_id=BOARD_ENTITY,
                payload={"seq": seq, "reason": reason, "error": self._last_save_error},
            )
            return False

        if self._last_save_error is not None:
            logger.info("Board save #{} succeeded after an earlier failure", seq)
            self._last_save_error = None
            self.bus.emit(
                channel=PERSISTENCE_CHANNEL,
                event_type="board.save_recovered",
                entity_id=BOARD_ENTITY,
                payload={"seq": seq, "reason": reason},
            )
        return True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued save has finished. Returns False on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = self._pending
                if pending is None or (pending.done() and not self._draining):
                    return True
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
            done, _ = wait([pending], timeout=remaining)
            if pending not in done:
                return False

    def shutdown(self, *, timeout: float = 10.0) -> None:
        self.flush(timeout=max(timeout, 0.0))
        with self._lock:
            pool = self._pool
            self._pool = None
            self._pending = None
            self._queued = None
            self._draining = False
        if pool is not None:
            pool.shutdown(wait=True)


def create_board_service(container: BoardContainer, *, background_saves: Optional[bool] = None) -> BoardService:
    """Build a service from a :class:`BoardContainer` and load its board."""
    service = BoardService(
        container.gateway,
        container.config,
        container.bus,
        background_saves=background_saves,
    )
    service.initialize()
    return service
