"""スキーマパッケージ

Pydanticスキーマを提供
"""

# Health関連スキーマ
from taskstack.schemas.health import HealthResponse, ServicesStatus, UnhealthyResponse

# Task関連スキーマ
from taskstack.schemas.task import (
    ErrorResponse,
    StatsEnvelope,
    StatsResponse,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskMessageEnvelope,
    TaskResponse,
    TaskUpdate,
)

__all__ = [
    # Task関連
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskListEnvelope",
    "TaskEnvelope",
    "TaskMessageEnvelope",
    "StatsResponse",
    "StatsEnvelope",
    "ErrorResponse",
    # Health関連
    "HealthResponse",
    "ServicesStatus",
    "UnhealthyResponse",
]
