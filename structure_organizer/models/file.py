from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from .base import Base

if TYPE_CHECKING:
    from .structure import Structure
    from .folder import Folder

class File(Base):

    __tablename__ = "files"
    __table_args__ = (
        UniqueConstraint("path", "structure_id", name="uq_files_path_structure"),
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
    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(20),
        default="#000000",
        nullable=False
    )

    folder_id: Mapped[int] = mapped_column(
        ForeignKey("folders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    structure_id: Mapped[int] = mapped_column(
        ForeignKey("structures.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    folder: Mapped["Folder"] = relationship(
        "Folder",
        back_populates="files"
    )
    structure: Mapped["Structure"] = relationship(
        "Structure",
        back_populates="files"
    )

    def __repr__(self) -> str:
        return f"<File(id={self.id}, path='{self.path}', type='{self.type}')>"
