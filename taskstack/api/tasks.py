"""タスクAPIエンドポイント

タスクの作成、取得、更新、削除のREST APIを提供
各エンドポイントはリポジトリ操作を1つ呼び出すだけの薄い層
"""

# FastAPIの依存注入システム（Depends）はLint警告の対象外とする
# ruff: noqa: B008

from fastapi import APIRouter, Depends
from fastapi import status as http_status

from taskstack.core.constants import ErrorMessages, SuccessMessages
from taskstack.core.dependencies import get_task_repository
from taskstack.repositories.task import TaskRepositoryInterface
from taskstack.schemas.task import (
    ErrorResponse,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskMessageEnvelope,
    TaskResponse,
    TaskUpdate,
)
from taskstack.utils.error_handler import handle_api_error

router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": ErrorMessages.TASK_NOT_FOUND}}


@router.get("", response_model=TaskListEnvelope)
@handle_api_error("タスク一覧取得")
async def get_tasks(*, repository: TaskRepositoryInterface = Depends(get_task_repository)) -> TaskListEnvelope:
    """タスク一覧を取得（作成日時の降順）"""
    result = await repository.list_tasks()
    return TaskListEnvelope(
        source=result.source,
        data=[TaskResponse.model_validate(task) for task in result.data],
    )


@router.post(
    "",
    response_model=TaskMessageEnvelope,
    status_code=http_status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": ErrorMessages.TASK_TITLE_REQUIRED}},
)
@handle_api_error("タスク作成")
async def create_task(
    *, repository: TaskRepositoryInterface = Depends(get_task_repository), task_in: TaskCreate
) -> TaskMessageEnvelope:
    """タスクを作成"""
    task = await repository.create_task(task_in.title, task_in.description)
    return TaskMessageEnvelope(message=SuccessMessages.TASK_CREATED, data=TaskResponse.model_validate(task))


# IDは文字列で受け取り、整数として解釈できない場合はリポジトリが404とする
@router.get("/{task_id}", response_model=TaskEnvelope, responses=NOT_FOUND_RESPONSE)
@handle_api_error("タスク取得")
async def get_task(
    *, repository: TaskRepositoryInterface = Depends(get_task_repository), task_id: str
) -> TaskEnvelope:
    """特定タスクを取得"""
    result = await repository.get_task(task_id)
    return TaskEnvelope(source=result.source, data=TaskResponse.model_validate(result.data))


@router.put("/{task_id}", response_model=TaskMessageEnvelope, responses=NOT_FOUND_RESPONSE)
@handle_api_error("タスク更新")
async def update_task(
    *,
    repository: TaskRepositoryInterface = Depends(get_task_repository),
    task_id: str,
    task_in: TaskUpdate,
) -> TaskMessageEnvelope:
    """タスクを部分更新（省略したフィールドは現在値を維持）"""
    task = await repository.update_task(
        task_id,
        title=task_in.title,
        description=task_in.description,
        completed=task_in.completed,
    )
    return TaskMessageEnvelope(message=SuccessMessages.TASK_UPDATED, data=TaskResponse.model_validate(task))


@router.delete("/{task_id}", response_model=TaskMessageEnvelope, responses=NOT_FOUND_RESPONSE)
@handle_api_error("タスク削除")
async def delete_task(
    *, repository: TaskRepositoryInterface = Depends(get_task_repository), task_id: str
) -> TaskMessageEnvelope:
    """タスクを削除し、削除前のタスクを返す"""
    task = await repository.delete_task(task_id)
    return TaskMessageEnvelope(message=SuccessMessages.TASK_DELETED, data=TaskResponse.model_validate(task))
