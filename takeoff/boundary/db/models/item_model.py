"""
Project item ORM model.

One structured line extracted from a project file. BOQ items carry their
provenance (sheet, row, chunk) as real columns so partial retries can
replace exactly the rows of one chunk.

Dependencies: sqlalchemy, takeoff.boundary.db.base
System role: Extracted line item persistence
"""

import enum
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from takeoff.boundary.db.base import Base, UUIDMixin, TimestampMixin, str_enum


class ItemSource(str, enum.Enum):
    """Origin of an extracted item."""

    CAD = "cad"
    BOQ = "boq"
    SCHEDULE = "schedule"
    MANUAL = "manual"


class ProjectItemModel(Base, UUIDMixin, TimestampMixin):
    """
    Project item ORM model.

    Attributes:
        project_id: Owning project
        file_id: File the item was extracted from
        source: cad | boq | schedule | manual
        item_code: Item key or code
        description: Item description
        notes: Free text notes
        box: Drawing bounding box {"left", "top", "right", "bottom"} or None
        fields: Raw column values keyed by header
        category / subcategory: BOQ grouping labels
        sheet_name / sheet_index / row_index: BOQ row provenance
        chunk_index / chunk_count: BOQ chunk provenance
    """

    __tablename__ = "project_items"
    __table_args__ = (
        Index("ix_project_items_file_source", "file_id", "source"),
        Index("ix_project_items_file_sheet_chunk", "file_id", "sheet_name", "chunk_index"),
    )

    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_id: Mapped[UUID] = mapped_column(
        ForeignKey("project_files.id", ondelete="CASCADE"),
        nullable=False,
    )
    source: Mapped[ItemSource] = mapped_column(str_enum(ItemSource), nullable=False)

    item_code: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    box: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    fields: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subcategory: Mapped[str | None] = mapped_column(String(255), nullable=True)

    sheet_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sheet_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    row_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    chunk_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    chunk_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
