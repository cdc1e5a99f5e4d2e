from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List, TYPE_CHECKING

from .base import Base

if TYPE_CHECKING:
    from .structure import Structure
    from .file import File

class Folder(Base):

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("path", "structure_id", name="uq_folders_path_structure"),
        {"sqlite_autoincrement": True},
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    path: Mapped[str] = mapped_column(
        String(4096),
        nullable=False,
        index=True
    )
    level: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False
    )

    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("folders.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    structure_id: Mapped[int] = mapped_column(
        ForeignKey("structures.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    structure: Mapped["Structure"] = relationship(
        "Structure",
        back_populates="folders"
    )
    parent: Mapped[Optional["Folder"]] = relationship(
        "Folder",
        remote_side="Folder.id",
        back_populates="children"
    )
    children: Mapped[List["Folder"]] = relationship(
        "Folder",
        back_populates="parent",
        passive_deletes=True
    )
    files: Mapped[List["File"]] = relationship(
        "File",
        back_populates="folder",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, path='{self.path}', level={self.level})>"
