"""タスクリポジトリ

ストアアダプタとキャッシュアダプタを組み合わせたキャッシュアサイド層
- 読み取り: キャッシュ → （ミス時）ストア → キャッシュへ格納
- 書き込み: ストアを更新 → 関連キャッシュを削除（キャッシュへは書き込まない）
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from taskstack.core.constants import CacheConstants, ErrorMessages, TaskConstants
from taskstack.core.exceptions import TaskNotFoundError, TaskValidationError
from taskstack.core.redis import CacheBackendInterface
from taskstack.crud.task import TaskStoreInterface
from taskstack.dtos.task import SourcedResult, TaskDTO, TaskStatsDTO
from taskstack.utils.error_handler import safe_cache_call

logger = logging.getLogger(__name__)

# PostgreSQL の integer 型の上限
MAX_TASK_ID = 2**31 - 1


class TaskRepositoryInterface(ABC):
    """タスクリポジトリのインターフェース"""

    @abstractmethod
    async def list_tasks(self) -> SourcedResult[list[TaskDTO]]:
        """全タスクを作成日時の降順で取得"""
        pass

    @abstractmethod
    async def get_task(self, task_id: int | str) -> SourcedResult[TaskDTO]:
        """IDでタスクを取得"""
        pass

    @abstractmethod
    async def create_task(self, title: str | None, description: str | None = None) -> TaskDTO:
        """タスクを作成"""
        pass

    @abstractmethod
    async def update_task(
        self,
        task_id: int | str,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> TaskDTO:
        """タスクを部分更新"""
        pass

    @abstractmethod
    async def delete_task(self, task_id: int | str) -> TaskDTO:
        """タスクを削除"""
        pass

    @abstractmethod
    async def get_stats(self) -> TaskStatsDTO:
        """タスクの集計を取得（キャッシュしない）"""
        pass


class TaskRepository(TaskRepositoryInterface):
    """キャッシュアサイド方式のタスクリポジトリ

    キャッシュの障害はすべてこのクラス内で吸収し、ストアにフォールバックする
    ストアの障害はそのまま呼び出し元へ伝播する
    """

    def __init__(
        self,
        store: TaskStoreInterface,
        cache: CacheBackendInterface,
        *,
        ttl_seconds: int = CacheConstants.DEFAULT_TTL_SECONDS,
    ) -> None:
        self.store = store
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    # =========================================================================
    # 読み取り（キャッシュ優先、ミス時にストアから読み込んでキャッシュへ格納）
    # =========================================================================

    async def list_tasks(self) -> SourcedResult[list[TaskDTO]]:
        key = CacheConstants.TASK_LIST_KEY

        cached = await self._read_cache(key)
        if cached is not None:
            tasks = self._decode_task_list(key, cached)
            if tasks is not None:
                logger.debug("キャッシュからタスク一覧を返却")
                return SourcedResult(source=CacheConstants.SOURCE_CACHE, data=tasks)

        tasks = await self.store.select_all()
        await self._write_cache(key, json.dumps([task.to_dict() for task in tasks]))

        logger.debug("データベースからタスク一覧を返却")
        return SourcedResult(source=CacheConstants.SOURCE_DATABASE, data=tasks)

    async def get_task(self, task_id: int | str) -> SourcedResult[TaskDTO]:
        task_id = self._normalize_task_id(task_id)
        key = CacheConstants.task_key(task_id)

        cached = await self._read_cache(key)
        if cached is not None:
            task = self._decode_task(key, cached)
            if task is not None:
                return SourcedResult(source=CacheConstants.SOURCE_CACHE, data=task)

        task = await self.store.select_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        await self._write_cache(key, json.dumps(task.to_dict()))
        return SourcedResult(source=CacheConstants.SOURCE_DATABASE, data=task)

    async def get_stats(self) -> TaskStatsDTO:
        # 集計は常にストアから（キャッシュしない）
        return await self.store.count_stats()

    # =========================================================================
    # 書き込み（ストア更新後にキャッシュを削除）
    # =========================================================================

    async def create_task(self, title: str | None, description: str | None = None) -> TaskDTO:
        self._validate_title(title, required=True)
        assert title is not None

        task = await self.store.insert(
            title, description if description is not None else TaskConstants.DEFAULT_DESCRIPTION
        )
        logger.info(f"タスクを作成しました: id={task.id}")

        await self._invalidate(CacheConstants.TASK_LIST_KEY)
        return task

    async def update_task(
        self,
        task_id: int | str,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> TaskDTO:
        task_id = self._normalize_task_id(task_id)
        if title is not None:
            self._validate_title(title, required=False)

        task = await self.store.update_by_id(task_id, title=title, description=description, completed=completed)
        if task is None:
            raise TaskNotFoundError(task_id)
        logger.info(f"タスクを更新しました: id={task_id}")

        await self._invalidate(CacheConstants.TASK_LIST_KEY, CacheConstants.task_key(task_id))
        return task

    async def delete_task(self, task_id: int | str) -> TaskDTO:
        task_id = self._normalize_task_id(task_id)

        task = await self.store.delete_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        logger.info(f"タスクを削除しました: id={task_id}")

        await self._invalidate(CacheConstants.TASK_LIST_KEY, CacheConstants.task_key(task_id))
        return task

    # =========================================================================
    # キャッシュ操作（失敗はミス扱い）
    # =========================================================================

    async def _read_cache(self, key: str) -> str | None:
        value: str | None = await safe_cache_call("キャッシュ取得", self.cache.get(key), key=key)
        return value or None

    async def _write_cache(self, key: str, value: str) -> None:
        await safe_cache_call("キャッシュ設定", self.cache.set(key, value, self.ttl_seconds), key=key)

    async def _invalidate(self, *keys: str) -> None:
        await safe_cache_call("キャッシュ削除", self.cache.delete(*keys), keys=",".join(keys))

    def _decode_task(self, key: str, raw: str) -> TaskDTO | None:
        try:
            return TaskDTO.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"キャッシュ値を復元できません（ミス扱い）: {key}, {e}")
            return None

    def _decode_task_list(self, key: str, raw: str) -> list[TaskDTO] | None:
        try:
            data: Any = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError("cached task list is not a JSON array")
            return [TaskDTO.from_dict(item) for item in data]
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"キャッシュ値を復元できません（ミス扱い）: {key}, {e}")
            return None

    # =========================================================================
    # 検証
    # =========================================================================

    @staticmethod
    def _validate_title(title: str | None, *, required: bool) -> None:
        if title is None:
            if required:
                raise TaskValidationError(ErrorMessages.TASK_TITLE_REQUIRED)
            return

        if not title.strip():
            raise TaskValidationError(ErrorMessages.TASK_TITLE_REQUIRED)

        if len(title) > TaskConstants.TITLE_MAX_LENGTH:
            raise TaskValidationError(ErrorMessages.TASK_TITLE_TOO_LONG)

    @staticmethod
    def _normalize_task_id(task_id: int | str) -> int:
        """IDを整数に変換（整数として解釈できないIDは存在しないものとして扱う）"""
        if isinstance(task_id, bool):
            raise TaskNotFoundError(task_id)
        if isinstance(task_id, str):
            # "²" などの非ASCII数字は int() で解釈できない
            if not (task_id.isascii() and task_id.isdigit()):
                raise TaskNotFoundError(task_id)
            task_id = int(task_id)
        if not (1 <= task_id <= MAX_TASK_ID):
            raise TaskNotFoundError(task_id)
        return task_id
