"""リポジトリパッケージ

ストアとキャッシュを組み合わせたデータアクセス層を提供
"""

from taskstack.repositories.task import TaskRepository, TaskRepositoryInterface

__all__ = [
    "TaskRepositoryInterface",
    "TaskRepository",
]
