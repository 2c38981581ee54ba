"""アプリケーション定数管理

バリデーション値、キャッシュキー、エラーメッセージを一元管理
"""

# =============================================================================
# タスク関連定数
# =============================================================================


class TaskConstants:
    """タスク関連の定数"""

    # タスクタイトル設定
    TITLE_MAX_LENGTH = 255

    # デフォルト値
    DEFAULT_DESCRIPTION = ""
    DEFAULT_COMPLETED = False


# =============================================================================
# キャッシュ関連定数
# =============================================================================


class CacheConstants:
    """キャッシュ関連の定数"""

    # 一覧キャッシュのキー（全インスタンス共通の固定キー）
    TASK_LIST_KEY = "tasks:all"

    # 単一タスクキャッシュのキー
    TASK_KEY_PREFIX = "task:"

    DEFAULT_TTL_SECONDS = 60

    # 取得元の識別子（レスポンスの source フィールド）
    SOURCE_CACHE = "cache"
    SOURCE_DATABASE = "database"

    @classmethod
    def task_key(cls, task_id: int) -> str:
        """単一タスクのキャッシュキーを生成"""
        return f"{cls.TASK_KEY_PREFIX}{task_id}"


# =============================================================================
# データベース関連定数
# =============================================================================


class DatabaseConstants:
    """データベース関連の定数"""

    # 接続プール設定
    DB_POOL_SIZE_MIN = 1
    DB_POOL_SIZE_MAX = 50
    DB_MAX_OVERFLOW_MIN = 0
    DB_MAX_OVERFLOW_MAX = 100

    # Redis設定
    REDIS_PORT_MIN = 1
    REDIS_PORT_MAX = 65535
    REDIS_DB_MIN = 0
    REDIS_DB_MAX = 15
    REDIS_POOL_SIZE_MIN = 1
    REDIS_POOL_SIZE_MAX = 100


# =============================================================================
# レスポンスメッセージ定数
# =============================================================================


class SuccessMessages:
    """成功メッセージの定数（クライアント向けのため英語）"""

    TASK_CREATED = "Task created successfully"
    TASK_UPDATED = "Task updated successfully"
    TASK_DELETED = "Task deleted successfully"


class ErrorMessages:
    """エラーメッセージの定数（クライアント向けのため英語）"""

    TASK_NOT_FOUND = "Task not found"
    TASK_TITLE_REQUIRED = "Title is required"
    TASK_TITLE_TOO_LONG = f"Title must be at most {TaskConstants.TITLE_MAX_LENGTH} characters"
    ENDPOINT_NOT_FOUND = "Endpoint not found"
    INTERNAL_SERVER_ERROR = "Internal server error"
    DATABASE_UNAVAILABLE = "Database is unavailable"
    INVALID_REQUEST = "Invalid request"


class HealthStatus:
    """ヘルスチェックの状態値"""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    CONNECTED = "connected"
