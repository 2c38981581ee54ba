"""アプリケーションコンテキスト

プロセス全体で共有する接続（データベース接続プール、Redis接続）を保持する
起動時に一度だけ作成し、終了時に一度だけ閉じる
リポジトリはこのコンテキストから組み立てられる
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from taskstack.core.config import Settings, get_settings
from taskstack.core.constants import HealthStatus
from taskstack.core.database import DatabaseManager, close_database, init_database
from taskstack.core.exceptions import StoreUnavailableError
from taskstack.core.redis import CacheBackendInterface, RedisCache, RedisManager, close_redis, init_redis
from taskstack.crud.task import CRUDTask
from taskstack.repositories.task import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """プロセス全体の接続を保持するコンテキスト

    cache を指定しない場合は Redis をキャッシュとして使用する
    （テストでは偽のキャッシュを差し込める）
    """

    settings: Settings
    database: DatabaseManager
    redis: RedisManager
    cache: CacheBackendInterface | None = None
    _repository: TaskRepository | None = field(default=None, init=False, repr=False)
    _uses_redis: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.cache is None:
            self.cache = RedisCache(self.redis, timeout=self.settings.CACHE_OPERATION_TIMEOUT)
            self._uses_redis = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AppContext":
        """設定からコンテキストを作成（接続はまだ開かない）"""
        settings = settings or get_settings()
        return cls(settings=settings, database=DatabaseManager(settings), redis=RedisManager(settings))

    @property
    def repository(self) -> TaskRepository:
        """タスクリポジトリを取得（初回アクセス時に組み立てる）"""
        if self._repository is None:
            assert self.cache is not None
            store = CRUDTask(self.database.create_session_factory(), timeout=self.settings.DB_STATEMENT_TIMEOUT)
            self._repository = TaskRepository(store, self.cache, ttl_seconds=self.settings.CACHE_TTL_SECONDS)
        return self._repository

    async def startup(self) -> None:
        """接続を初期化

        データベースに接続できない場合は例外を送出する（起動失敗）
        Redisに接続できない場合は警告のみでキャッシュなしの縮退運転となる
        """
        logger.info("📊 データベース接続を初期化中...")
        await init_database(self.database, create_tables=self.settings.DB_CREATE_TABLES)

        if self._uses_redis:
            logger.info("📡 Redis接続を初期化中...")
            await init_redis(self.redis)

    async def shutdown(self) -> None:
        """接続を終了"""
        await close_database(self.database)

        if self._uses_redis:
            await close_redis(self.redis)

        self._repository = None

    async def health_check(self) -> dict[str, Any]:
        """データベースとキャッシュの疎通を確認

        Raises:
            StoreUnavailableError: データベースに接続できない
            CacheUnavailableError: キャッシュに接続できない
        """
        assert self.cache is not None

        try:
            async with asyncio.timeout(self.settings.DB_STATEMENT_TIMEOUT):
                await self.database.ping()
        except TimeoutError as e:
            raise StoreUnavailableError("Database health check timed out") from e

        await self.cache.ping()

        return {
            "status": HealthStatus.HEALTHY,
            "timestamp": datetime.now(UTC).isoformat(),
            "services": {
                "database": HealthStatus.CONNECTED,
                "redis": HealthStatus.CONNECTED,
            },
        }
