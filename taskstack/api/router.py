"""APIルーター統合

すべてのAPIエンドポイントを統合（/api 配下にマウントされる）
"""

from fastapi import APIRouter

from taskstack.api import stats, tasks
from taskstack.core.constants import ErrorMessages
from taskstack.schemas.task import ErrorResponse

# メインのAPIルーター
api_router = APIRouter(
    responses={500: {"model": ErrorResponse, "description": ErrorMessages.INTERNAL_SERVER_ERROR}},
)

# タスク管理エンドポイント
api_router.include_router(tasks.router, prefix="/tasks", tags=["タスク管理"])

# 集計エンドポイント
api_router.include_router(stats.router, prefix="/stats", tags=["集計"])


__all__ = ["api_router"]
