"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from takeoff.boundary.db.CRUD import job_crud, file_crud

    # Use singleton instances
    job = await job_crud.get_by_id(db, job_id)

    # Or instantiate classes directly for custom behavior
    from takeoff.boundary.db.CRUD import JobCRUD
    custom_crud = JobCRUD()
"""

from takeoff.boundary.db.CRUD.base_crud import BaseCRUD
from takeoff.boundary.db.CRUD.project_crud import ProjectCRUD, project_crud
from takeoff.boundary.db.CRUD.file_crud import ProjectFileCRUD, file_crud
from takeoff.boundary.db.CRUD.job_crud import JobCRUD, job_crud
from takeoff.boundary.db.CRUD.item_crud import ProjectItemCRUD, item_crud
from takeoff.boundary.db.CRUD.log_crud import ProjectLogCRUD, log_crud

__all__ = [
    "BaseCRUD",
    "ProjectCRUD",
    "project_crud",
    "ProjectFileCRUD",
    "file_crud",
    "JobCRUD",
    "job_crud",
    "ProjectItemCRUD",
    "item_crud",
    "ProjectLogCRUD",
    "log_crud",
]
