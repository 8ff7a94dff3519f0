# Domain models package (Pydantic models)

from src.stapler.domain.lyric_line import LyricLine
from src.stapler.domain.operation import (
    OperationKind,
    OperationState,
    OperationStatus,
)
from src.stapler.domain.pagination import PageRequest, PaginatedResponse

__all__ = [
    "LyricLine",
    "OperationKind",
    "OperationState",
    "OperationStatus",
    "PageRequest",
    "PaginatedResponse",
]
