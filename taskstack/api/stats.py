"""タスク集計APIエンドポイント"""

# ruff: noqa: B008

from fastapi import APIRouter, Depends

from taskstack.core.dependencies import get_task_repository
from taskstack.repositories.task import TaskRepositoryInterface
from taskstack.schemas.task import StatsEnvelope, StatsResponse
from taskstack.utils.error_handler import handle_api_error

router = APIRouter()


@router.get("", response_model=StatsEnvelope)
@handle_api_error("タスク集計")
async def get_stats(*, repository: TaskRepositoryInterface = Depends(get_task_repository)) -> StatsEnvelope:
    """総数・完了数・未完了数を取得（常にデータベースから集計）"""
    stats = await repository.get_stats()
    return StatsEnvelope(data=StatsResponse(total=stats.total, completed=stats.completed, pending=stats.pending))
