"""ベースDTOクラス

すべてのDTOの基底クラスを提供
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class BaseDTO:
    """ベースDTOクラス

    - dataclass(frozen=True): イミュータブルなデータクラス
    - 共通フィールドの定義
    - キャッシュ用のJSON互換辞書への変換
    """

    id: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """JSON互換の辞書形式に変換（日時はISO 8601文字列）"""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
        return data

    @staticmethod
    def parse_datetime(value: datetime | str) -> datetime:
        """ISO 8601文字列またはdatetimeをdatetimeに変換"""
        if isinstance(value, datetime):
            return value
        return datetime.fromisoformat(value)
