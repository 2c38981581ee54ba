"""アプリケーション設定管理モジュール

Pydantic V2 BaseSettingsを使用した設定システムを提供
すべての設定は環境変数から読み込まれ、未指定の場合はデフォルト値を使用する
"""

import os
from typing import Annotated, Any, ClassVar
from urllib.parse import quote_plus

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from taskstack.core.constants import CacheConstants, DatabaseConstants


class Settings(BaseSettings):
    """アプリケーション設定

    Pydantic V2を使用して環境変数から設定を読み込む（設定は自動的に検証・型チェックされる）
    """

    # =============================================================================
    # Pydantic V2 設定
    # =============================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        validate_assignment=True,
    )

    # =============================================================================
    # アプリケーション設定
    # =============================================================================
    PROJECT_NAME: str = "Task Management API"
    PROJECT_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    HOST: str = "0.0.0.0"  # nosec B104 # noqa: S104 # コンテナ内で全インターフェースにバインド
    PORT: int = Field(default=5000)

    # =============================================================================
    # データベース設定
    # =============================================================================
    DATABASE_HOST: str = Field(default="database")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_NAME: str = Field(default="taskdb")
    DATABASE_USER: str = Field(default="admin")
    DATABASE_PASSWORD: str = Field(default="admin123")
    DATABASE_URL: str | None = Field(default=None)
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_STATEMENT_TIMEOUT: float = Field(default=5.0)
    DB_CREATE_TABLES: bool = Field(default=True)

    # =============================================================================
    # Redis設定
    # =============================================================================
    REDIS_HOST: str = Field(default="redis")
    REDIS_PORT: int = Field(default=6379)
    REDIS_PASSWORD: str | None = Field(default="redis123")
    REDIS_DB: int = Field(default=0)
    REDIS_POOL_SIZE: int = Field(default=10)
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30)

    # =============================================================================
    # キャッシュ設定
    # =============================================================================
    CACHE_TTL_SECONDS: int = Field(default=CacheConstants.DEFAULT_TTL_SECONDS)
    CACHE_OPERATION_TIMEOUT: float = Field(default=1.0)

    # =============================================================================
    # CORS設定
    # =============================================================================
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    # =============================================================================
    # ログレベル設定
    # =============================================================================
    VALID_LOG_LEVELS: ClassVar[list[str]] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    # =============================================================================
    # バリデーター（Pydantic V2）
    # =============================================================================

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_db_pool_size(cls, v: int) -> int:
        if not (DatabaseConstants.DB_POOL_SIZE_MIN <= v <= DatabaseConstants.DB_POOL_SIZE_MAX):
            raise ValueError(
                f"DB_POOL_SIZE must be between "
                f"{DatabaseConstants.DB_POOL_SIZE_MIN} and {DatabaseConstants.DB_POOL_SIZE_MAX}"
            )
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_db_max_overflow(cls, v: int) -> int:
        if not (DatabaseConstants.DB_MAX_OVERFLOW_MIN <= v <= DatabaseConstants.DB_MAX_OVERFLOW_MAX):
            raise ValueError(
                f"DB_MAX_OVERFLOW must be between "
                f"{DatabaseConstants.DB_MAX_OVERFLOW_MIN} and {DatabaseConstants.DB_MAX_OVERFLOW_MAX}"
            )
        return v

    @field_validator("REDIS_PORT")
    @classmethod
    def validate_redis_port(cls, v: int) -> int:
        if not (DatabaseConstants.REDIS_PORT_MIN <= v <= DatabaseConstants.REDIS_PORT_MAX):
            raise ValueError(
                f"REDIS_PORT must be between {DatabaseConstants.REDIS_PORT_MIN} and {DatabaseConstants.REDIS_PORT_MAX}"
            )
        return v

    @field_validator("REDIS_DB")
    @classmethod
    def validate_redis_db(cls, v: int) -> int:
        if not (DatabaseConstants.REDIS_DB_MIN <= v <= DatabaseConstants.REDIS_DB_MAX):
            raise ValueError(
                f"REDIS_DB must be between {DatabaseConstants.REDIS_DB_MIN} and {DatabaseConstants.REDIS_DB_MAX}"
            )
        return v

    @field_validator("REDIS_POOL_SIZE")
    @classmethod
    def validate_redis_pool_size(cls, v: int) -> int:
        if not (DatabaseConstants.REDIS_POOL_SIZE_MIN <= v <= DatabaseConstants.REDIS_POOL_SIZE_MAX):
            raise ValueError(
                f"REDIS_POOL_SIZE must be between "
                f"{DatabaseConstants.REDIS_POOL_SIZE_MIN} and {DatabaseConstants.REDIS_POOL_SIZE_MAX}"
            )
        return v

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def normalize_redis_password(cls, v: str | None) -> str | None:
        """空文字列のパスワードは認証なしとして扱う"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("CACHE_TTL_SECONDS")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v < 1:
            raise ValueError("CACHE_TTL_SECONDS must be a positive number of seconds")
        return v

    @field_validator("DB_STATEMENT_TIMEOUT", "CACHE_OPERATION_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """CORS originをカンマ区切り文字列またはリストから解析"""
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        elif isinstance(v, list):
            return v
        return ["*"]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in cls.VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(cls.VALID_LOG_LEVELS)}")
        return v.upper()

    # =============================================================================
    # 計算プロパティ（Pydantic V2）
    # =============================================================================

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url_async(self) -> str:
        """asyncpg用の非同期PostgreSQL接続URLを生成（DATABASE_URLが指定されていればそれを優先）"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        encoded_password = quote_plus(self.DATABASE_PASSWORD)
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{encoded_password}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """開発環境で実行中かチェック"""
        return self.ENVIRONMENT.lower() == "development"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """本番環境で実行中かチェック"""
        return self.ENVIRONMENT.lower() == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_testing(self) -> bool:
        """テスト環境で実行中かチェック"""
        return self.ENVIRONMENT.lower() == "testing"

    # =============================================================================
    # ヘルパーメソッド
    # =============================================================================

    def get_cors_config(self) -> dict[str, Any]:
        # ワイルドカード指定時はCredentialsを許可できない（CORS仕様）
        allow_all = "*" in self.BACKEND_CORS_ORIGINS
        return {
            "allow_origins": self.BACKEND_CORS_ORIGINS,
            "allow_credentials": not allow_all,
            "allow_methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["*"],
        }


# =============================================================================
# グローバル設定インスタンス（シングルトン）
# =============================================================================

_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """シングルトンパターンで設定インスタンスを取得"""
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = Settings()

    return _settings_instance


def reset_settings() -> None:
    """シングルトンインスタンスをリセット（主にテスト用）"""
    global _settings_instance
    _settings_instance = None


def create_test_settings(**overrides: Any) -> Settings:
    """テスト用設定でシングルトンを置き換える

    環境変数は変更せず、上書き値を直接Settingsに渡す

    注意: この関数はテスト環境でのみ使用してください

    Args:
        **overrides: テスト用に上書きする設定

    Returns:
        テスト値を持つSettingsインスタンス

    Example:
        test_settings = create_test_settings(CACHE_TTL_SECONDS=5)
        try:
            # テスト実行
            pass
        finally:
            reset_settings()  # 必ずリセット
    """
    global _settings_instance

    test_defaults: dict[str, Any] = {
        "ENVIRONMENT": "testing",
        "LOG_LEVEL": "WARNING",
        "DATABASE_URL": os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:"),
        "REDIS_DB": 1,  # テスト用に異なるRedis DBを使用
    }
    test_defaults.update(overrides)

    _settings_instance = Settings(**test_defaults)
    return _settings_instance


if __name__ == "__main__":
    # 開発用: 現在の設定を表示（パスワードは除外）
    current = get_settings()
    print(current.model_dump(exclude={"DATABASE_PASSWORD", "REDIS_PASSWORD", "DATABASE_URL", "database_url_async"}))
