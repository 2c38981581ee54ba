"""タスクリポジトリのキャッシュアサイド動作テスト

読み取り時のキャッシュ格納、書き込み時の無効化、キャッシュ停止時のフォールバックを検証
"""

import json

import pytest

from taskstack.core.constants import CacheConstants, ErrorMessages
from taskstack.core.context import AppContext
from taskstack.core.exceptions import StoreUnavailableError, TaskNotFoundError, TaskValidationError
from taskstack.crud.task import CRUDTask
from taskstack.dtos.task import TaskDTO
from taskstack.repositories.task import TaskRepository
from tests.tests_config.fakes import FailingCache, FailingStore, FakeCache

LIST_KEY = CacheConstants.TASK_LIST_KEY


class TestListTasks:
    """タスク一覧取得テスト"""

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, repository: TaskRepository) -> None:
        """タスクがない場合は空リスト"""
        result = await repository.list_tasks()

        assert result.source == "database"
        assert result.data == []

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO) -> None:
        """初回はデータベース、2回目はキャッシュから同じ内容を返す"""
        first = await repository.list_tasks()
        second = await repository.list_tasks()

        assert first.source == "database"
        assert second.source == "cache"
        assert first.data == second.data == [test_task]
        assert fake_cache.ttls[LIST_KEY] == 60

    @pytest.mark.asyncio
    async def test_newest_first(self, repository: TaskRepository) -> None:
        """作成日時の降順（同時刻はID降順）"""
        older = await repository.create_task("古いタスク")
        newer = await repository.create_task("新しいタスク")

        result = await repository.list_tasks()

        assert [task.id for task in result.data] == [newer.id, older.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cached", ["{not json", '"abc"', "[1]", '{"id": 1}', '[{"id": 1}]'])
    async def test_corrupt_cache_entry_is_miss(
        self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO, cached: str
    ) -> None:
        """復元できないキャッシュ値はミスとして扱い、データベースから再取得"""
        fake_cache.data[LIST_KEY] = cached

        result = await repository.list_tasks()

        assert result.source == "database"
        assert result.data == [test_task]
        assert json.loads(fake_cache.data[LIST_KEY])[0]["id"] == test_task.id


class TestGetTask:
    """タスク詳細取得テスト"""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO) -> None:
        """初回はデータベース、2回目はキャッシュ"""
        first = await repository.get_task(test_task.id)
        second = await repository.get_task(test_task.id)

        assert first.source == "database"
        assert second.source == "cache"
        assert first.data == second.data == test_task
        assert CacheConstants.task_key(test_task.id) in fake_cache.data

    @pytest.mark.asyncio
    async def test_accepts_numeric_string_id(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """数字のみの文字列IDは整数として扱う"""
        result = await repository.get_task(str(test_task.id))

        assert result.data.id == test_task.id

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(self, repository: TaskRepository, fake_cache: FakeCache) -> None:
        """存在しないIDは常にNotFound（キャッシュに格納しない）"""
        for _ in range(2):
            with pytest.raises(TaskNotFoundError):
                await repository.get_task(9999)

        assert CacheConstants.task_key(9999) not in fake_cache.data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cached", ["{not json", '"abc"', "[1]", "42", "null", '{"id": 1}'])
    async def test_corrupt_cache_entry_is_miss(
        self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO, cached: str
    ) -> None:
        """復元できないキャッシュ値はミスとして扱い、データベースから再取得"""
        key = CacheConstants.task_key(test_task.id)
        fake_cache.data[key] = cached

        result = await repository.get_task(test_task.id)

        assert result.source == "database"
        assert result.data == test_task
        assert json.loads(fake_cache.data[key])["id"] == test_task.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("task_id", ["abc", "1.5", "-1", "0", "", str(2**31), "²", "١٢"])
    async def test_invalid_id_is_not_found(self, repository: TaskRepository, task_id: str) -> None:
        """整数として解釈できないIDはNotFound"""
        with pytest.raises(TaskNotFoundError) as exc_info:
            await repository.get_task(task_id)

        assert exc_info.value.message == ErrorMessages.TASK_NOT_FOUND


class TestCreateTask:
    """タスク作成テスト"""

    @pytest.mark.asyncio
    async def test_create_defaults(self, repository: TaskRepository) -> None:
        """説明は空文字列、完了フラグはFalseで作成される"""
        task = await repository.create_task("Buy milk")

        assert task.id > 0
        assert task.title == "Buy milk"
        assert task.description == ""
        assert task.completed is False
        assert task.updated_at >= task.created_at

    @pytest.mark.asyncio
    async def test_create_then_get(self, repository: TaskRepository) -> None:
        """作成したタスクを取得すると同じ内容"""
        created = await repository.create_task("Buy milk", "2 liters")

        fetched = await repository.get_task(created.id)

        assert fetched.data == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_blank_title_rejected(
        self, repository: TaskRepository, fake_cache: FakeCache, title: str | None
    ) -> None:
        """タイトルが空の場合は検証エラー（ストア・キャッシュは変更しない）"""
        with pytest.raises(TaskValidationError) as exc_info:
            await repository.create_task(title)

        assert exc_info.value.message == ErrorMessages.TASK_TITLE_REQUIRED
        assert fake_cache.calls == []
        assert (await repository.get_stats()).total == 0

    @pytest.mark.asyncio
    async def test_too_long_title_rejected(self, repository: TaskRepository) -> None:
        """255文字を超えるタイトルは検証エラー"""
        with pytest.raises(TaskValidationError):
            await repository.create_task("a" * 256)

    @pytest.mark.asyncio
    async def test_create_invalidates_list(self, repository: TaskRepository, fake_cache: FakeCache) -> None:
        """作成後は一覧キャッシュが削除され、次の一覧取得はデータベースから"""
        await repository.list_tasks()
        assert LIST_KEY in fake_cache.data

        created = await repository.create_task("新しいタスク")

        assert LIST_KEY not in fake_cache.data
        result = await repository.list_tasks()
        assert result.source == "database"
        assert result.data == [created]

    @pytest.mark.asyncio
    async def test_create_never_writes_cache(self, repository: TaskRepository, fake_cache: FakeCache) -> None:
        """書き込み操作はキャッシュへ値を格納しない"""
        await repository.create_task("新しいタスク")

        assert fake_cache.count("set") == 0


class TestUpdateTask:
    """タスク更新テスト"""

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """completedのみの更新ではタイトル・説明は変わらない"""
        updated = await repository.update_task(test_task.id, completed=True)

        assert updated.completed is True
        assert updated.title == test_task.title
        assert updated.description == test_task.description
        assert updated.created_at == test_task.created_at
        assert updated.updated_at >= test_task.updated_at

    @pytest.mark.asyncio
    async def test_update_all_fields(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """全フィールドの更新"""
        updated = await repository.update_task(test_task.id, title="更新後", description="説明", completed=True)

        assert (updated.title, updated.description, updated.completed) == ("更新後", "説明", True)

    @pytest.mark.asyncio
    async def test_update_can_clear_description(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """空文字列の説明は値として反映される（Noneとは区別）"""
        updated = await repository.update_task(test_task.id, description="")

        assert updated.description == ""

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """空白のみのタイトルへの更新は検証エラー"""
        with pytest.raises(TaskValidationError):
            await repository.update_task(test_task.id, title="  ")

        assert (await repository.get_task(test_task.id)).data.title == test_task.title

    @pytest.mark.asyncio
    async def test_update_missing_task(self, repository: TaskRepository, fake_cache: FakeCache) -> None:
        """存在しないタスクの更新はNotFound（キャッシュは変更しない）"""
        with pytest.raises(TaskNotFoundError):
            await repository.update_task(9999, completed=True)

        assert fake_cache.count("delete") == 0

    @pytest.mark.asyncio
    async def test_update_invalidates_list_and_detail(
        self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO
    ) -> None:
        """更新後は一覧・詳細キャッシュが削除され、次の取得は新しい値"""
        await repository.list_tasks()
        await repository.get_task(test_task.id)

        await repository.update_task(test_task.id, completed=True)

        assert LIST_KEY not in fake_cache.data
        assert CacheConstants.task_key(test_task.id) not in fake_cache.data

        result = await repository.get_task(test_task.id)
        assert result.source == "database"
        assert result.data.completed is True


class TestDeleteTask:
    """タスク削除テスト"""

    @pytest.mark.asyncio
    async def test_delete_returns_deleted_task(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """削除前のタスクを返し、以降の取得はNotFound"""
        deleted = await repository.delete_task(test_task.id)

        assert deleted == test_task
        with pytest.raises(TaskNotFoundError):
            await repository.get_task(test_task.id)

    @pytest.mark.asyncio
    async def test_delete_twice(self, repository: TaskRepository, test_task: TaskDTO) -> None:
        """2回目の削除はNotFound"""
        await repository.delete_task(test_task.id)

        with pytest.raises(TaskNotFoundError):
            await repository.delete_task(test_task.id)

    @pytest.mark.asyncio
    async def test_delete_invalidates_cached_detail(
        self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO
    ) -> None:
        """削除後はキャッシュ済みの詳細も返らない"""
        await repository.get_task(test_task.id)
        await repository.list_tasks()

        await repository.delete_task(test_task.id)

        assert fake_cache.data == {}
        assert (await repository.list_tasks()).data == []


class TestStats:
    """集計テスト"""

    @pytest.mark.asyncio
    async def test_stats_empty(self, repository: TaskRepository) -> None:
        """タスクがない場合はすべて0"""
        stats = await repository.get_stats()

        assert stats.to_dict() == {"total": 0, "completed": 0, "pending": 0}

    @pytest.mark.asyncio
    async def test_stats_counts(self, repository: TaskRepository, three_tasks_one_completed: list[TaskDTO]) -> None:
        """3件中1件完了"""
        stats = await repository.get_stats()

        assert stats.to_dict() == {"total": 3, "completed": 1, "pending": 2}

    @pytest.mark.asyncio
    async def test_stats_not_cached(
        self, repository: TaskRepository, fake_cache: FakeCache, test_task: TaskDTO
    ) -> None:
        """集計はキャッシュを使用しない"""
        fake_cache.calls.clear()

        await repository.get_stats()

        assert fake_cache.calls == []


class TestCacheOutage:
    """キャッシュ停止時の縮退動作テスト"""

    @pytest.mark.asyncio
    async def test_all_operations_succeed(self, app_context: AppContext, failing_cache: FailingCache) -> None:
        """キャッシュが全く使えなくても全操作が成功し、常にデータベースから返す"""
        store = app_context.repository.store
        repository = TaskRepository(store, failing_cache)

        created = await repository.create_task("Buy milk")
        listed = await repository.list_tasks()
        fetched = await repository.get_task(created.id)
        updated = await repository.update_task(created.id, completed=True)
        refetched = await repository.get_task(created.id)
        deleted = await repository.delete_task(created.id)

        assert listed.source == fetched.source == refetched.source == "database"
        assert listed.data == [created]
        assert updated.completed is True
        assert refetched.data == updated
        assert deleted == updated
        assert failing_cache.attempts > 0


class TestStoreOutage:
    """データベース停止時のテスト"""

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fake_cache: FakeCache) -> None:
        """データベースの障害は呼び出し元へ伝播する"""
        repository = TaskRepository(FailingStore(), fake_cache)

        with pytest.raises(StoreUnavailableError):
            await repository.list_tasks()
        with pytest.raises(StoreUnavailableError):
            await repository.get_stats()

    @pytest.mark.asyncio
    async def test_failed_write_leaves_cache_untouched(self, fake_cache: FakeCache) -> None:
        """書き込みが失敗した場合はキャッシュを変更しない"""
        fake_cache.data[LIST_KEY] = "[]"
        repository = TaskRepository(FailingStore(), fake_cache)

        with pytest.raises(StoreUnavailableError):
            await repository.create_task("Buy milk")
        with pytest.raises(StoreUnavailableError):
            await repository.delete_task(1)

        assert fake_cache.data == {LIST_KEY: "[]"}
        assert fake_cache.count("delete") == 0


class TestRepositoryAssembly:
    """コンテキストからの組み立てテスト"""

    def test_store_adapter_type(self, repository: TaskRepository) -> None:
        """コンテキストから組み立てたリポジトリは SQLAlchemy ストアを使用する"""
        assert isinstance(repository.store, CRUDTask)
        assert repository.ttl_seconds == 60
