"""タスクモデル

tasks テーブルの定義
"""

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from taskstack.core.constants import ErrorMessages, TaskConstants
from taskstack.models.base import Base


class Task(Base):
    """タスクモデル

    tasks(id, title, description, completed, created_at, updated_at)
    """

    title: Mapped[str] = mapped_column(String(TaskConstants.TITLE_MAX_LENGTH), nullable=False, comment="タスクタイトル")

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default=TaskConstants.DEFAULT_DESCRIPTION, server_default="", comment="タスクの詳細説明"
    )

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=TaskConstants.DEFAULT_COMPLETED,
        server_default=false(),
        comment="完了フラグ",
    )

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="title_not_empty"),
        Index("ix_tasks_created_at", "created_at"),
    )

    @validates("title")
    def validate_title(self, key: str, title: str) -> str:  # noqa: ARG002
        if not title or not title.strip():
            raise ValueError(ErrorMessages.TASK_TITLE_REQUIRED)

        if len(title) > TaskConstants.TITLE_MAX_LENGTH:
            raise ValueError(ErrorMessages.TASK_TITLE_TOO_LONG)

        return title

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, completed={self.completed})>"
