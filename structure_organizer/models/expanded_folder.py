from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

class ExpandedFolder(Base):

    __tablename__ = "expanded_folders"
    __table_args__ = (
        UniqueConstraint("viewer_id", "folder_id", name="uq_expanded_folders_viewer_folder"),
    )

    viewer_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True
    )
    folder_id: Mapped[int] = mapped_column(
        ForeignKey("folders.id", ondelete="CASCADE"),
        nullable=False
    )
    structure_id: Mapped[int] = mapped_column(
        ForeignKey("structures.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<ExpandedFolder(viewer_id='{self.viewer_id}', folder_id={self.folder_id})>"
