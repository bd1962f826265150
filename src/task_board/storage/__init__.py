from .file_gateway import FileBoardGateway, MemoryBoardGateway
from .interfaces import BoardGateway

__all__ = [
    "BoardGateway",
    "FileBoardGateway",
    "MemoryBoardGateway",
]
