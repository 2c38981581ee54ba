"""タスクDTO

タスクデータの転送オブジェクト
ストア・キャッシュ・API間で受け渡す不変の値
"""

from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Generic, Literal, TypeVar

from taskstack.dtos.base import BaseDTO

T = TypeVar("T")

DataSource = Literal["cache", "database"]


@dataclass(frozen=True)
class TaskDTO(BaseDTO):
    """タスクDTO"""

    title: str
    description: str
    completed: bool

    @classmethod
    def from_row(cls, mapping: Mapping[str, Any]) -> "TaskDTO":
        """データベースの行（RowMapping）または辞書からDTOを作成"""
        if not isinstance(mapping, Mapping):
            raise TypeError(f"task row must be a mapping, got {type(mapping).__name__}")
        return cls(
            id=int(mapping["id"]),
            title=mapping["title"],
            description=mapping["description"] if mapping["description"] is not None else "",
            completed=bool(mapping["completed"]),
            created_at=cls.parse_datetime(mapping["created_at"]),
            updated_at=cls.parse_datetime(mapping["updated_at"]),
        )

    @classmethod
    def from_dict(cls, data: Any) -> "TaskDTO":
        """キャッシュから復元したJSON辞書からDTOを作成"""
        return cls.from_row(data)


@dataclass(frozen=True)
class TaskStatsDTO:
    """タスク集計DTO"""

    total: int
    completed: int
    pending: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "completed": self.completed, "pending": self.pending}


@dataclass(frozen=True)
class SourcedResult(Generic[T]):
    """取得元（cache / database）付きの読み取り結果"""

    source: DataSource
    data: T
