import enum
from sqlalchemy import String, Integer, Float, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

class TargetType(enum.Enum):

    FILE = "file"
    FOLDER = "folder"

    def __str__(self) -> str:
        return self.value

class Comment(TimestampMixin, Base):

    __tablename__ = "comments"
    __table_args__ = {"sqlite_autoincrement": True}

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(20),
        default="#FFD700",
        nullable=False
    )
    # No foreign key: the target lives in either `files` or `folders`.
    target_type: Mapped[TargetType] = mapped_column(
        Enum(TargetType, values_callable=lambda members: [m.value for m in members]),
        nullable=False,
        index=True
    )
    target_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True
    )
    x: Mapped[float] = mapped_column(
        Float,
        default=0,
        nullable=False
    )
    y: Mapped[float] = mapped_column(
        Float,
        default=0,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, target={self.target_type}:{self.target_id})>"
