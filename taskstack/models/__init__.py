"""モデルパッケージ

すべてのSQLAlchemyモデルをインポートするためのエントリーポイント
"""

from taskstack.models.base import Base
from taskstack.models.task import Task

__all__ = [
    "Base",
    "Task",
]
