"""Project API: read and edit projects, recompute event-proximity statuses."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.errors import ApiError, parse_id
from speaker_bureau.app.routes.auth import get_current_admin
from speaker_bureau.domain.schemas import ProjectResponse, ProjectUpdate, StatusUpdateResult
from speaker_bureau.infra.database import get_db
from speaker_bureau.services import project_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/projects",
    tags=["projects"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.list_projects(db, status=status)


# Declared before /{project_id} so "update-statuses" is not read as an id
@router.post("/update-statuses", response_model=StatusUpdateResult)
async def update_statuses(db: AsyncSession = Depends(get_db)):
    result = await project_service.update_all_project_statuses(db)
    return StatusUpdateResult(
        message=f"Updated {result['updated']} project statuses",
        updated=result["updated"],
        errors=result["errors"],
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    project = await project_service.get_project(db, parse_id(project_id, "project"))
    if project is None:
        raise ApiError(404, "Project not found", f"No project with id {project_id}")
    return project


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str, data: ProjectUpdate, db: AsyncSession = Depends(get_db)
):
    project = await project_service.get_project(db, parse_id(project_id, "project"))
    if project is None:
        raise ApiError(404, "Project not found", f"No project with id {project_id}")
    return await project_service.update_project(db, project, data)
