"""データベース接続管理モジュール

SQLAlchemy 2.x + asyncpgを使用したPostgreSQL接続の管理、
非同期セッション、接続プール、ヘルスチェック機能を提供
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskstack.core.config import Settings
from taskstack.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class DatabaseConfigurationError(Exception):
    """データベース設定関連のエラー"""

    pass


class DatabaseManager:
    """データベース接続を管理するクラス

    SQLAlchemy 2.x準拠の非同期エンジンとセッション管理を提供
    起動時に一度だけ作成され、アプリケーションコンテキストを通じて共有される
    """

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None) -> None:
        self._settings = settings
        self._engine: AsyncEngine | None = engine
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def create_engine(self) -> AsyncEngine:
        """非同期SQLAlchemyエンジンを作成（接続プール付き）"""
        if self._engine is not None:
            return self._engine

        settings = self._settings
        url = settings.database_url_async
        if not url:
            raise DatabaseConfigurationError("データベースURLが設定されていません")

        engine_kwargs: dict[str, Any] = {
            "echo": False,
            "future": True,
            "pool_pre_ping": True,  # 接続確認
        }

        if url.startswith("postgresql"):
            engine_kwargs.update(
                {
                    "pool_size": settings.DB_POOL_SIZE,
                    "max_overflow": settings.DB_MAX_OVERFLOW,
                    "pool_timeout": settings.DB_STATEMENT_TIMEOUT,
                    "pool_recycle": 3600,  # 1時間でコネクションを再作成
                    "connect_args": {
                        "timeout": settings.DB_STATEMENT_TIMEOUT,
                        "command_timeout": settings.DB_STATEMENT_TIMEOUT,
                        "server_settings": {
                            "application_name": f"taskstack-{settings.ENVIRONMENT}",
                            "timezone": "UTC",
                        },
                    },
                }
            )

        try:
            self._engine = create_async_engine(url, **engine_kwargs)
            logger.info(f"データベースエンジンが作成されました: {settings.DATABASE_HOST}:{settings.DATABASE_PORT}")
            return self._engine

        except Exception as e:
            logger.error(f"データベースエンジンの作成に失敗しました: {e}")
            raise

    def create_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """非同期セッションファクトリーを作成"""
        if self._session_factory is not None:
            return self._session_factory

        engine = self.create_engine()

        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,  # コミット後もオブジェクトを使用可能
            autoflush=False,
        )

        logger.info("データベースセッションファクトリーが作成されました")
        return self._session_factory

    async def ping(self) -> None:
        """SELECT 1 で接続を確認（失敗時は StoreUnavailableError）"""
        engine = self.create_engine()
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailableError(str(e)) from e

    async def create_tables(self) -> None:
        """すべてのテーブルを作成（既存のテーブルはそのまま）

        注意: スキーマ変更（マイグレーション）は扱わない
        """
        from taskstack.models import Base

        engine = self.create_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("テーブルの作成が完了しました")

    async def close(self) -> None:
        """データベースエンジンとセッションを終了

        アプリケーション終了時に呼び出す
        """
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("データベースエンジンを閉じました")
            self._engine = None
            self._session_factory = None


# アプリケーションライフサイクル管理
async def init_database(manager: DatabaseManager, *, create_tables: bool = True) -> None:
    try:
        # エンジンとセッションファクトリーを初期化
        manager.create_session_factory()

        # 接続テスト
        await manager.ping()

        if create_tables:
            await manager.create_tables()

        logger.info("データベースの初期化が完了しました")

    except Exception as e:
        logger.error(f"データベース初期化中にエラーが発生しました: {e}")
        raise


async def close_database(manager: DatabaseManager) -> None:
    """データベース接続を終了"""
    try:
        await manager.close()
        logger.info("データベース接続を正常に閉じました")

    except Exception as e:
        logger.error(f"データベース接続の終了中にエラーが発生しました: {e}")
