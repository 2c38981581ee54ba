"""DTOパッケージ

Data Transfer Objectsを提供
各レイヤー間のデータ転送を担当する
"""

from taskstack.dtos.base import BaseDTO
from taskstack.dtos.task import DataSource, SourcedResult, TaskDTO, TaskStatsDTO

__all__ = [
    "BaseDTO",
    "DataSource",
    "SourcedResult",
    "TaskDTO",
    "TaskStatsDTO",
]
