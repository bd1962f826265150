from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..config import load_board_config
from ..events.bus import EventBus
from .bootstrap import ensure_state_root
from .file_gateway import FileBoardGateway


class BoardContainer:
    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir.resolve()
        self.state_root = ensure_state_root(self.project_dir)

        self.config, self.config_error = load_board_config(self.state_root)
        if self.config_error:
            logger.warning("Using default board config: {}", self.config_error)

        board_path = self.state_root / self.config.storage_path
        self.gateway = FileBoardGateway(board_path, board_path.with_suffix(f"{board_path.suffix}.lock"))
        self.bus = EventBus(self.project_id)

    @property
    def project_id(self) -> str:
        return self.project_dir.name
