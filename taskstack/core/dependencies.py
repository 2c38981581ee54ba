"""依存性注入設定モジュール

アプリケーションコンテキストからリポジトリを取り出してエンドポイントへ注入する
"""

from fastapi import Request

from taskstack.core.context import AppContext
from taskstack.repositories.task import TaskRepositoryInterface


def get_app_context(request: Request) -> AppContext:
    """起動時に作成されたアプリケーションコンテキストを取得"""
    context: AppContext = request.app.state.context
    return context


def get_task_repository(request: Request) -> TaskRepositoryInterface:
    """タスクリポジトリの依存性注入

    テスト時は app.dependency_overrides で差し替え可能

    Returns:
        タスクリポジトリインスタンス
    """
    return get_app_context(request).repository
