"""タスク関連のPydanticスキーマ

タスクの作成、更新、応答のリクエスト・レスポンススキーマを提供
タイトルの必須チェックはリポジトリ側で行う（エラーメッセージを統一するため）
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskstack.core.constants import TaskConstants
from taskstack.dtos.task import DataSource


class TaskCreate(BaseModel):
    """タスク作成リクエストスキーマ"""

    title: str | None = Field(
        None,
        description="タスクタイトル（必須、空白のみは不可）",
        examples=["Buy milk"],
    )

    description: str | None = Field(
        None,
        description="タスクの詳細説明（省略時は空文字列）",
        examples=["2 liters"],
    )


class TaskUpdate(BaseModel):
    """タスク更新リクエストスキーマ（部分更新対応）

    省略またはnullのフィールドは現在値を維持する
    """

    title: str | None = Field(None, description="タスクタイトル")
    description: str | None = Field(None, description="タスクの詳細説明")
    completed: bool | None = Field(None, description="完了フラグ")


class TaskResponse(BaseModel):
    """タスク応答スキーマ"""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="タスクID")
    title: str = Field(..., max_length=TaskConstants.TITLE_MAX_LENGTH, description="タスクタイトル")
    description: str = Field(TaskConstants.DEFAULT_DESCRIPTION, description="タスクの詳細説明")
    completed: bool = Field(TaskConstants.DEFAULT_COMPLETED, description="完了フラグ")
    created_at: datetime = Field(..., description="作成日時")
    updated_at: datetime = Field(..., description="更新日時")


class TaskListEnvelope(BaseModel):
    """タスク一覧応答（取得元付き）"""

    source: DataSource = Field(..., description="取得元（cache / database）")
    data: list[TaskResponse] = Field(..., description="タスクリスト（作成日時の降順）")


class TaskEnvelope(BaseModel):
    """タスク詳細応答（取得元付き）"""

    source: DataSource = Field(..., description="取得元（cache / database）")
    data: TaskResponse = Field(..., description="タスク")


class TaskMessageEnvelope(BaseModel):
    """作成・更新・削除の応答"""

    message: str = Field(..., description="結果メッセージ")
    data: TaskResponse = Field(..., description="対象タスク（削除時は削除前の状態）")


class StatsResponse(BaseModel):
    """タスク集計"""

    total: int = Field(..., ge=0, description="総件数")
    completed: int = Field(..., ge=0, description="完了件数")
    pending: int = Field(..., ge=0, description="未完了件数")


class StatsEnvelope(BaseModel):
    """タスク集計応答（集計は常にデータベースから）"""

    data: StatsResponse = Field(..., description="集計結果")


class ErrorResponse(BaseModel):
    """エラー応答"""

    error: str = Field(..., description="エラーメッセージ")

