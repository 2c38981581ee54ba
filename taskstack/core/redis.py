"""Redis接続管理モジュール

Redisクライアントの接続管理と、キャッシュアダプタ（get / set / delete）を提供
キャッシュは派生データのみを保持し、決して正とはみなさない
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import cast

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from taskstack.core.config import Settings
from taskstack.core.exceptions import CacheUnavailableError
from taskstack.utils.error_handler import handle_cache_operation

logger = logging.getLogger(__name__)


class RedisManager:
    """Redis接続を管理するクラス

    非同期Redis操作、接続プール管理を提供
    起動時に一度だけ作成され、アプリケーションコンテキストを通じて共有される
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client: Redis | None = None
        self._pool: ConnectionPool | None = None

    def create_connection_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        settings = self._settings
        self._validate_redis_settings()

        try:
            self._pool = ConnectionPool(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                password=settings.REDIS_PASSWORD,
                db=settings.REDIS_DB,
                encoding="utf-8",
                decode_responses=True,
                max_connections=settings.REDIS_POOL_SIZE,
                health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
                socket_timeout=settings.CACHE_OPERATION_TIMEOUT,
                socket_connect_timeout=settings.CACHE_OPERATION_TIMEOUT,
            )
            logger.info(f"Redis接続プールが作成されました: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
            return self._pool

        except Exception as e:
            logger.error(f"Redis接続プールの作成に失敗しました: {e}")
            raise

    def _validate_redis_settings(self) -> None:
        """Redis設定の検証"""
        settings = self._settings
        if not settings.REDIS_HOST or not settings.REDIS_HOST.strip():
            raise ValueError("REDIS_HOSTが設定されていません")

        if settings.is_production and settings.REDIS_HOST in ["localhost", "127.0.0.1"]:
            logger.warning("本番環境でlocalhostのRedisを使用しています")

        logger.debug("Redis設定の検証が完了しました")

    def create_client(self) -> Redis:
        if self._client is not None:
            return self._client

        pool = self.create_connection_pool()

        try:
            self._client = Redis(connection_pool=pool)
            logger.info("Redisクライアントが作成されました")
            return self._client

        except Exception as e:
            logger.error(f"Redisクライアントの作成に失敗しました: {e}")
            raise

    async def ping(self) -> bool:
        """Redisの接続チェック"""
        try:
            client = self.create_client()
            await asyncio.wait_for(client.ping(), timeout=self._settings.CACHE_OPERATION_TIMEOUT)
            logger.debug("Redis接続チェック: 正常")
            return True

        except (RedisError, OSError, TimeoutError) as e:
            logger.error(f"Redis接続チェック失敗: {e}")
            return False

    async def close(self) -> None:
        try:
            if self._client is not None:
                await self._client.aclose()
                logger.info("Redisクライアントを閉じました")
                self._client = None

            if self._pool is not None:
                await self._pool.aclose()
                logger.info("Redis接続プールを閉じました")
                self._pool = None

        except (RedisError, OSError) as e:
            logger.error(f"Redis接続の終了中にエラーが発生しました: {e}")


class CacheBackendInterface(ABC):
    """キャッシュアダプタのインターフェース

    値は不透明な文字列（シリアライズ形式はリポジトリ側の責務）
    失敗時は CacheUnavailableError を送出する
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """キーから値を取得（存在しない・空文字列の場合はNone）"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """有効期限付きで値を設定"""
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        """キーを削除"""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """疎通確認"""
        pass


class RedisCache(CacheBackendInterface):
    """Redisキャッシュ操作を提供するクラス

    すべての呼び出しは CACHE_OPERATION_TIMEOUT 秒で打ち切られる
    """

    def __init__(self, manager: RedisManager, timeout: float) -> None:
        self._manager = manager
        self._timeout = timeout

    @property
    def client(self) -> Redis:
        """Redisクライアントを取得"""
        try:
            return self._manager.create_client()
        except ValueError as e:
            raise CacheUnavailableError(str(e)) from e

    @handle_cache_operation("キャッシュ取得")
    async def get(self, key: str) -> str | None:
        value = await asyncio.wait_for(self.client.get(key), timeout=self._timeout)
        if not value:
            logger.debug(f"キャッシュミス: {key}")
            return None
        logger.debug(f"キャッシュヒット: {key}")
        return cast("str", value)  # decode_responses=True なので str

    @handle_cache_operation("キャッシュ設定")
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await asyncio.wait_for(self.client.set(key, value, ex=ttl_seconds), timeout=self._timeout)
        logger.debug(f"キャッシュ設定: {key}, expire={ttl_seconds}")

    @handle_cache_operation("キャッシュ削除")
    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        await asyncio.wait_for(self.client.delete(*keys), timeout=self._timeout)
        logger.debug(f"キャッシュ削除: {', '.join(keys)}")

    @handle_cache_operation("キャッシュ疎通確認")
    async def ping(self) -> None:
        await asyncio.wait_for(self.client.ping(), timeout=self._timeout)


# アプリケーションライフサイクル管理
async def init_redis(manager: RedisManager) -> None:
    """Redis接続を初期化

    接続できない場合も起動は継続する（キャッシュなしの縮退運転）
    """
    try:
        manager.create_client()

        is_connected = await manager.ping()
        if is_connected:
            logger.info("Redisの初期化が完了しました")
        else:
            logger.warning("Redisに接続できません。キャッシュなしで起動します")

    except ValueError as e:
        logger.error(f"Redis設定エラー: {e}")
        raise


async def close_redis(manager: RedisManager) -> None:
    try:
        await manager.close()
        logger.info("Redis接続を正常に閉じました")

    except Exception as e:
        logger.error(f"Redis接続の終了中にエラーが発生しました: {e}")
