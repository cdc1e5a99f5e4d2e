from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List, TYPE_CHECKING

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .folder import Folder
    from .file import File

class Structure(TimestampMixin, Base):

    __tablename__ = "structures"
    __table_args__ = {"sqlite_autoincrement": True}

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False
    )

    folders: Mapped[List["Folder"]] = relationship(
        "Folder",
        back_populates="structure",
        passive_deletes=True
    )
    files: Mapped[List["File"]] = relationship(
        "File",
        back_populates="structure",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Structure(id={self.id}, name='{self.name}', position={self.position})>"
