"""ヘルスチェック関連のPydanticスキーマ"""

from pydantic import BaseModel, Field


class ServicesStatus(BaseModel):
    """依存サービスの接続状態"""

    database: str = Field(..., examples=["connected"])
    redis: str = Field(..., examples=["connected"])


class HealthResponse(BaseModel):
    """正常時のヘルスチェック応答"""

    status: str = Field(..., examples=["healthy"])
    timestamp: str = Field(..., description="確認日時（ISO 8601, UTC）")
    services: ServicesStatus


class UnhealthyResponse(BaseModel):
    """異常時のヘルスチェック応答（503）"""

    status: str = Field(..., examples=["unhealthy"])
    error: str = Field(..., description="失敗の内容")
