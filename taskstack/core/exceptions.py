"""ドメイン例外クラス

リポジトリ層から送出され、API層でHTTPレスポンスに変換される
"""

from taskstack.core.constants import ErrorMessages


class TaskStackError(Exception):
    """アプリケーション例外の基底クラス"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskValidationError(TaskStackError):
    """入力値の検証エラー（400）"""

    pass


class TaskNotFoundError(TaskStackError):
    """指定IDのタスクが存在しない（404）"""

    def __init__(self, task_id: int | str, message: str = ErrorMessages.TASK_NOT_FOUND) -> None:
        super().__init__(message)
        self.task_id = task_id


class StoreUnavailableError(TaskStackError):
    """データベース接続・クエリの失敗（500、リトライしない）"""

    pass


class CacheUnavailableError(TaskStackError):
    """キャッシュ接続・タイムアウトの失敗

    リポジトリ内で吸収され、クライアントには返されない
    """

    pass
