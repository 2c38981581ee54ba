"""エラーハンドリング関連ユーティリティ

アダプタ境界でのライブラリ例外の変換、API境界でのHTTP例外への変換を提供
"""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from fastapi import HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from taskstack.core.config import get_settings
from taskstack.core.constants import ErrorMessages
from taskstack.core.exceptions import (
    CacheUnavailableError,
    StoreUnavailableError,
    TaskNotFoundError,
    TaskValidationError,
)

T = TypeVar("T")


def get_logger(name: str) -> logging.Logger:
    """統一フォーマットのロガー取得

    Args:
        name: ロガー名（通常は __name__ を渡す）

    Returns:
        設定済みのロガーインスタンス
    """
    return logging.getLogger(name)


def handle_db_operation(operation_name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """データベース操作用デコレータ

    SQLAlchemyの例外とタイムアウトを StoreUnavailableError に変換する
    - エラーログの出力
    - 例外の再発生（リトライはしない）

    Args:
        operation_name: 操作名（ログ出力用）

    Usage:
        @handle_db_operation("タスク作成")
        async def insert(self, ...):
            # データベース操作
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = get_logger(func.__module__)
            try:
                return await func(*args, **kwargs)
            except TimeoutError as e:
                logger.error(f"{operation_name}がタイムアウトしました")
                raise StoreUnavailableError(f"{operation_name} timed out") from e
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"{operation_name}エラー: {e}")
                raise StoreUnavailableError(str(e)) from e

        return wrapper

    return decorator


def handle_cache_operation(
    operation_name: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """キャッシュ操作用デコレータ

    Redisの例外・接続エラー・タイムアウトを CacheUnavailableError に変換する

    Args:
        operation_name: 操作名（ログ出力用）
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = get_logger(func.__module__)
            try:
                return await func(*args, **kwargs)
            except TimeoutError as e:
                logger.debug(f"{operation_name}がタイムアウトしました")
                raise CacheUnavailableError(f"{operation_name} timed out") from e
            except (RedisError, OSError) as e:
                logger.debug(f"{operation_name}エラー: {e}")
                raise CacheUnavailableError(str(e)) from e

        return wrapper

    return decorator


async def safe_cache_call(
    operation_name: str, call: Awaitable[T], default_return: Any = None, **context: Any
) -> T | Any:
    """キャッシュ呼び出しを安全に実行

    CacheUnavailableError が発生してもリクエストを失敗させず、
    警告ログを出力してデフォルト値を返す（キャッシュはベストエフォート）

    Args:
        operation_name: 操作名
        call: 実行するキャッシュ操作のAwaitable
        default_return: 失敗時の戻り値
        **context: ログ用の追加コンテキスト

    Returns:
        キャッシュ操作の結果、失敗時は default_return
    """
    try:
        return await call
    except CacheUnavailableError as e:
        log_error(
            get_logger(__name__),
            f"{operation_name}（キャッシュを迂回して続行）",
            e,
            level=logging.WARNING,
            **context,
        )
        return default_return


def handle_api_error(operation_name: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """API層エラーハンドリング用デコレータ

    API層での統一されたエラーハンドリングを提供
    - ドメイン例外からHTTP例外への変換
    - データベース障害のログ出力と500エラー変換

    Args:
        operation_name: 操作名（ログ出力用）

    Usage:
        @handle_api_error("タスク作成")
        async def create_task(...):
            # API処理
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = get_logger(func.__module__)
            try:
                return await func(*args, **kwargs)

            except TaskValidationError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
            except TaskNotFoundError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
            except StoreUnavailableError as e:
                logger.error(f"{operation_name}中にエラー: {e}")
                # 本番環境では詳細なエラー情報を隠す
                detail = ErrorMessages.DATABASE_UNAVAILABLE if get_settings().is_production else e.message
                raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from e

        return wrapper

    return decorator


def log_error(
    logger: logging.Logger, operation: str, error: Exception, *, level: int = logging.ERROR, **context: Any
) -> None:
    """統一されたエラーログ出力

    Args:
        logger: ロガーインスタンス
        operation: 操作名
        error: 発生した例外
        level: ログレベル
        **context: 追加のコンテキスト情報
    """
    context_str = ", ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    log_message = f"{operation}エラー: {error}"
    if context_str:
        log_message += f" (context: {context_str})"

    logger.log(level, log_message)
