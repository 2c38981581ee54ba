"""タスクCRUDクラス

タスクテーブルに対するパラメータバインド済みのSQL文を実行するストアアダプタ
ビジネスロジックは持たない
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import Boolean, String, Text, bindparam, case, delete, func, insert, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Executable

from taskstack.dtos.task import TaskDTO, TaskStatsDTO
from taskstack.models.task import Task
from taskstack.utils.error_handler import handle_db_operation

tasks_table = Task.__table__
TASK_COLUMNS = tuple(tasks_table.c)


class TaskStoreInterface(ABC):
    """タスクストアのインターフェース（正となるデータの保持者）"""

    @abstractmethod
    async def insert(self, title: str, description: str) -> TaskDTO:
        """タスクを挿入し、採番済みの行を返す"""
        pass

    @abstractmethod
    async def select_all(self) -> list[TaskDTO]:
        """全タスクを作成日時の降順で取得"""
        pass

    @abstractmethod
    async def select_by_id(self, task_id: int) -> TaskDTO | None:
        """IDでタスクを取得"""
        pass

    @abstractmethod
    async def update_by_id(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> TaskDTO | None:
        """指定フィールドのみ更新（Noneは現在値を維持）"""
        pass

    @abstractmethod
    async def delete_by_id(self, task_id: int) -> TaskDTO | None:
        """タスクを削除し、削除前の行を返す"""
        pass

    @abstractmethod
    async def count_stats(self) -> TaskStatsDTO:
        """総数・完了数・未完了数を集計"""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """疎通確認"""
        pass


class CRUDTask(TaskStoreInterface):
    """SQLAlchemy（非同期）によるタスクストアの実装

    呼び出しごとに接続プールからセッションを取得し、1トランザクションで実行する
    すべての呼び出しは DB_STATEMENT_TIMEOUT 秒で打ち切られる
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout: float) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    async def _fetch(self, stmt: Executable) -> list[dict[str, Any]]:
        """文を実行し、結果行を辞書のリストとして返す"""
        async with asyncio.timeout(self._timeout):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings().all()]

    async def _fetch_task(self, stmt: Executable) -> TaskDTO | None:
        rows = await self._fetch(stmt)
        return TaskDTO.from_row(rows[0]) if rows else None

    @handle_db_operation("タスク作成")
    async def insert(self, title: str, description: str) -> TaskDTO:
        stmt = insert(tasks_table).values(title=title, description=description).returning(*TASK_COLUMNS)
        task = await self._fetch_task(stmt)
        if task is None:
            raise RuntimeError("INSERT did not return a row")
        return task

    @handle_db_operation("タスク一覧取得")
    async def select_all(self) -> list[TaskDTO]:
        stmt = select(*TASK_COLUMNS).order_by(tasks_table.c.created_at.desc(), tasks_table.c.id.desc())
        rows = await self._fetch(stmt)
        return [TaskDTO.from_row(row) for row in rows]

    @handle_db_operation("タスク取得")
    async def select_by_id(self, task_id: int) -> TaskDTO | None:
        stmt = select(*TASK_COLUMNS).where(tasks_table.c.id == bindparam("task_id", task_id))
        return await self._fetch_task(stmt)

    @handle_db_operation("タスク更新")
    async def update_by_id(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> TaskDTO | None:
        # COALESCE(値, 現在値): NULL が渡された列は変更しない
        stmt = (
            update(tasks_table)
            .where(tasks_table.c.id == bindparam("task_id", task_id))
            .values(
                title=func.coalesce(bindparam("new_title", title, type_=String), tasks_table.c.title),
                description=func.coalesce(
                    bindparam("new_description", description, type_=Text), tasks_table.c.description
                ),
                completed=func.coalesce(bindparam("new_completed", completed, type_=Boolean), tasks_table.c.completed),
                updated_at=func.now(),
            )
            .returning(*TASK_COLUMNS)
        )
        return await self._fetch_task(stmt)

    @handle_db_operation("タスク削除")
    async def delete_by_id(self, task_id: int) -> TaskDTO | None:
        stmt = delete(tasks_table).where(tasks_table.c.id == bindparam("task_id", task_id)).returning(*TASK_COLUMNS)
        return await self._fetch_task(stmt)

    @handle_db_operation("タスク集計")
    async def count_stats(self) -> TaskStatsDTO:
        stmt = select(
            func.count().label("total"),
            func.coalesce(func.sum(case((tasks_table.c.completed, 1), else_=0)), 0).label("completed"),
        ).select_from(tasks_table)
        rows = await self._fetch(stmt)
        total = int(rows[0]["total"] or 0)
        completed = int(rows[0]["completed"] or 0)
        return TaskStatsDTO(total=total, completed=completed, pending=total - completed)

    @handle_db_operation("データベース疎通確認")
    async def ping(self) -> None:
        await self._fetch(text("SELECT 1 AS ok"))
