"""CRUD パッケージ

ストアアダプタ（パラメータバインド済みSQLの実行）を提供
"""

from taskstack.crud.task import CRUDTask, TaskStoreInterface

__all__ = [
    "TaskStoreInterface",
    "CRUDTask",
]
