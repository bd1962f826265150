from __future__ import annotations

from pathlib import Path

from ..config import CONFIG_FILE, STATE_DIR_NAME, BoardConfig
from ..io_utils import _atomic_write_yaml


def ensure_state_root(project_dir: Path) -> Path:
    """Create the `.task_board/` directory and a default config on first use.

    An existing config file is left untouched.
    """
    state_root = project_dir / STATE_DIR_NAME
    state_root.mkdir(parents=True, exist_ok=True)

    config_path = state_root / CONFIG_FILE
    if not config_path.exists():
        _atomic_write_yaml(config_path, BoardConfig().to_dict())

    return state_root
