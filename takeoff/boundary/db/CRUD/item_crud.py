"""
Project item CRUD operations.

Items are never edited in place by the pipeline: a (re)processed file
replaces its items for one source, and a BOQ chunk replaces only the rows
it produced, identified by (sheet_name, chunk_index).

Dependencies: sqlalchemy, takeoff.boundary.db.models
System role: Extracted item persistence for the extraction pipeline
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.models.item_model import ItemSource, ProjectItemModel


class ProjectItemCRUD(BaseCRUD[ProjectItemModel]):
    """
    CRUD operations for ProjectItemModel.

    Extends BaseCRUD with source-scoped and chunk-scoped replacement.
    """

    def __init__(self) -> None:
        """Initialize ProjectItemCRUD with ProjectItemModel."""
        super().__init__(ProjectItemModel)

    async def delete_for_source(
        self,
        session: AsyncSession,
        file_id: UUID,
        source: ItemSource,
    ) -> int:
        """
        Delete every item of a file produced by one source.

        Args:
            session: Async database session
            file_id: File UUID
            source: Item source

        Returns:
            Number of deleted rows
        """
        stmt = delete(ProjectItemModel).where(
            ProjectItemModel.file_id == file_id,
            ProjectItemModel.source == source,
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def replace_for_source(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID,
        source: ItemSource,
        items: Sequence[dict[str, Any]],
    ) -> list[ProjectItemModel]:
        """
        Replace all items of a file for one source.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: File UUID
            source: Item source
            items: Item field values (without project/file/source)

        Returns:
            Inserted ProjectItemModels
        """
        await self.delete_for_source(session, file_id, source)
        rows = [
            {**item, "project_id": project_id, "file_id": file_id, "source": source}
            for item in items
        ]
        return await self.create_many(session, rows)

    async def replace_chunk(
        self,
        session: AsyncSession,
        project_id: UUID,
        file_id: UUID,
        sheet_name: str,
        chunk_index: int,
        items: Sequence[dict[str, Any]],
    ) -> list[ProjectItemModel]:
        """
        Replace the BOQ items produced by one chunk of one sheet.

        Items of every other chunk, including other chunks of the same
        sheet, are left untouched.

        Args:
            session: Async database session
            project_id: Project UUID
            file_id: File UUID
            sheet_name: Worksheet name
            chunk_index: Zero-based chunk index within the sheet
            items: Item field values including row provenance

        Returns:
            Inserted ProjectItemModels
        """
        stmt = delete(ProjectItemModel).where(
            ProjectItemModel.file_id == file_id,
            ProjectItemModel.source == ItemSource.BOQ,
            ProjectItemModel.sheet_name == sheet_name,
            ProjectItemModel.chunk_index == chunk_index,
        )
        await session.execute(stmt)
        rows = [
            {
                **item,
                "project_id": project_id,
                "file_id": file_id,
                "source": ItemSource.BOQ,
                "sheet_name": sheet_name,
                "chunk_index": chunk_index,
            }
            for item in items
        ]
        return await self.create_many(session, rows)

    async def list_for_file(
        self,
        session: AsyncSession,
        file_id: UUID,
        source: ItemSource | None = None,
    ) -> Sequence[ProjectItemModel]:
        """
        List items of a file in original sheet row order.

        Args:
            session: Async database session
            file_id: File UUID
            source: Optional source filter

        Returns:
            Sequence of ProjectItemModels ordered by (sheet_index, row_index, created_at)
        """
        stmt = select(ProjectItemModel).where(ProjectItemModel.file_id == file_id)
        if source is not None:
            stmt = stmt.where(ProjectItemModel.source == source)
        stmt = stmt.order_by(
            ProjectItemModel.sheet_index,
            ProjectItemModel.row_index,
            ProjectItemModel.created_at,
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_for_project(
        self,
        session: AsyncSession,
        project_id: UUID,
        source: ItemSource | None = None,
    ) -> Sequence[ProjectItemModel]:
        """
        List items of a project grouped by file, in row order within each file.

        Args:
            session: Async database session
            project_id: Project UUID
            source: Optional source filter

        Returns:
            Sequence of ProjectItemModels
        """
        stmt = select(ProjectItemModel).where(ProjectItemModel.project_id == project_id)
        if source is not None:
            stmt = stmt.where(ProjectItemModel.source == source)
        stmt = stmt.order_by(
            ProjectItemModel.file_id,
            ProjectItemModel.sheet_index,
            ProjectItemModel.row_index,
            ProjectItemModel.created_at,
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_source(
        self,
        session: AsyncSession,
        project_id: UUID,
        source: ItemSource,
    ) -> int:
        """
        Count project items produced by one source.

        Args:
            session: Async database session
            project_id: Project UUID
            source: Item source

        Returns:
            Number of items
        """
        stmt = select(func.count(ProjectItemModel.id)).where(
            ProjectItemModel.project_id == project_id,
            ProjectItemModel.source == source,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())


item_crud = ProjectItemCRUD()
