"""Project reads, admin edits and the event-proximity status recomputation."""

import logging
from datetime import date

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.domain.enums import ProjectStatus
from speaker_bureau.domain.models import Project, utcnow
from speaker_bureau.domain.schemas import ProjectUpdate

logger = logging.getLogger(__name__)

# Statuses the recomputation never touches
FROZEN_STATUSES = {ProjectStatus.COMPLETED.value, ProjectStatus.CANCELLED.value}


def compute_project_status(event_date: date, today: date | None = None) -> ProjectStatus:
    """Map days-until-event onto the project pipeline stage.

    >60 days: 2plus_months, 30-60: 1to2_months, 7-29: less_than_month,
    0-6: final_week, past: completed.
    """
    today = today or date.today()
    days_out = (event_date - today).days
    if days_out < 0:
        return ProjectStatus.COMPLETED
    if days_out < 7:
        return ProjectStatus.FINAL_WEEK
    if days_out < 30:
        return ProjectStatus.LESS_THAN_MONTH
    if days_out <= 60:
        return ProjectStatus.ONE_TO_TWO_MONTHS
    return ProjectStatus.TWO_PLUS_MONTHS


async def get_project(db: AsyncSession, project_id: int) -> Project | None:
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def list_projects(db: AsyncSession, status: str | None = None) -> list[Project]:
    stmt = select(Project).order_by(desc(Project.created_at), desc(Project.id))
    if status:
        stmt = stmt.where(Project.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_project(db: AsyncSession, project: Project, data: ProjectUpdate) -> Project:
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    for field, value in changes.items():
        setattr(project, field, value.value if hasattr(value, "value") else value)

    if changes.get("status") == ProjectStatus.COMPLETED and project.completed_at is None:
        project.completed_at = utcnow()

    project.updated_at = utcnow()
    await db.commit()
    await db.refresh(project)
    return project


async def update_all_project_statuses(db: AsyncSession, today: date | None = None) -> dict:
    """Recompute proximity status for every open project with an event date.

    Returns {"updated": n, "errors": n}. A project whose update fails is
    counted and skipped; the rest are still committed.
    """
    today = today or date.today()
    result = await db.execute(
        select(Project).where(
            Project.status.notin_(FROZEN_STATUSES),
            Project.event_date.is_not(None),
        )
    )
    projects = result.scalars().all()

    updated = 0
    errors = 0
    for project in projects:
        try:
            new_status = compute_project_status(project.event_date, today).value
            if new_status == project.status:
                continue
            logger.info(
                "Project %d status %s -> %s", project.id, project.status, new_status
            )
            project.status = new_status
            if new_status == ProjectStatus.COMPLETED.value:
                project.completed_at = utcnow()
            project.updated_at = utcnow()
            updated += 1
        except Exception as e:
            logger.error("Status update failed for project %d: %s", project.id, e)
            errors += 1

    await db.commit()
    return {"updated": updated, "errors": errors}
