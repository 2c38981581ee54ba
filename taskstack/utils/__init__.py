"""ユーティリティモジュール

共通的な処理を提供するユーティリティ関数・クラス群
"""

from taskstack.utils.error_handler import (
    get_logger,
    handle_api_error,
    handle_cache_operation,
    handle_db_operation,
    log_error,
    safe_cache_call,
)

__all__ = [
    # Error handling utilities
    "get_logger",
    "handle_api_error",
    "handle_cache_operation",
    "handle_db_operation",
    "log_error",
    "safe_cache_call",
]
