from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.models import Board


class BoardGateway(ABC):
    """Load and save the whole board as one replace-on-write record."""

    @abstractmethod
    def load(self) -> Optional[Board]:
        """Return the last saved board, or ``None`` when nothing was saved yet.

        Raises:
            BoardIOError: The medium could not be read or held an invalid board.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, board: Board) -> None:
        """Replace the stored board with *board*.

        Raises:
            BoardIOError: The write failed.
        """
        raise NotImplementedError

    def quarantine(self) -> Optional[str]:
        """Set aside a stored board that could not be used.

        Called before the service starts over from the default board, so the
        next save does not overwrite the only copy. Returns a description of
        where the old board went, or ``None`` when there was nothing to keep.

        Raises:
            BoardIOError: The stored board could not be moved.
        """
        return None
