"""SQLAlchemyベースモデル

すべてのモデルの基底クラスを提供
整数の自動採番主キー、データベース側で付与されるタイムスタンプ、ネーミング規則を統一
"""

import re
from datetime import datetime

from sqlalchemy import DateTime, Integer, MetaData, func
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# PostgreSQL制約命名規則の統一
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",  # インデックス
        "uq": "uq_%(table_name)s_%(column_0_name)s",  # ユニーク制約
        "ck": "ck_%(table_name)s_%(constraint_name)s",  # チェック制約
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # 外部キー
        "pk": "pk_%(table_name)s",  # プライマリキー
    }
)


class Base(DeclarativeBase):
    """SQLAlchemy 2.x準拠のベースクラス

    全てのモデルはこのクラスを継承する
    - 自動採番の整数主キー
    - 作成・更新タイムスタンプ（データベースの現在時刻）
    - テーブル名自動生成
    """

    metadata = metadata

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment="プライマリキー（自動採番）")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, comment="作成日時"
    )

    # 更新時の再設定は UPDATE 文で明示的に行う
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, comment="更新日時"
    )

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """テーブル名を自動生成

        例: Task -> tasks
        """
        name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", cls.__name__)
        return re.sub("([a-z0-9])([A-Z])", r"\1_\2", name).lower() + "s"

    def __repr__(self) -> str:
        """デバッグ用の文字列表現"""
        return f"<{self.__class__.__name__}(id={self.id})>"
