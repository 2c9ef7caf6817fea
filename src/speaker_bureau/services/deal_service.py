"""Deal persistence and the status transition handler.

update_deal() diffs the stored status against the updated one after the deal
commit. A move into "won" from any other status synthesizes one project. The
project write is a second, separate commit. If it fails, the failure is logged
and recorded as a project_creation_failed DealEvent, and the deal update still
succeeds. retry_project_creation() re-runs synthesis for such deals.
"""

import logging

from sqlalchemy import delete, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.domain.enums import DealEventType, DealStatus
from speaker_bureau.domain.models import Deal, DealEvent, Project, utcnow
from speaker_bureau.domain.schemas import DealCreate, DealUpdate
from speaker_bureau.services.project_synthesis import synthesize_project

logger = logging.getLogger(__name__)


class DealNotFoundError(Exception):
    """Raised when no deal row matches the requested id."""

    def __init__(self, deal_id: int):
        self.deal_id = deal_id
        super().__init__(f"Deal {deal_id} not found")


class ProjectRetryNotAllowedError(Exception):
    """Raised when a project retry is requested for a deal that doesn't need one."""


def crosses_into_won(original_status: str | None, updated_status: str | None) -> bool:
    """True only for a transition from a non-won status into won."""
    won = DealStatus.WON.value
    return original_status != won and updated_status == won


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_deal(db: AsyncSession, deal_id: int) -> Deal | None:
    result = await db.execute(select(Deal).where(Deal.id == deal_id))
    return result.scalar_one_or_none()


async def list_deals(
    db: AsyncSession,
    status: str | None = None,
    search: str | None = None,
) -> list[Deal]:
    """Return deals newest first, optionally filtered by status and a search term."""
    stmt = select(Deal).order_by(desc(Deal.created_at), desc(Deal.id))
    if status:
        stmt = stmt.where(Deal.status == status)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Deal.client_name.ilike(pattern),
                Deal.company.ilike(pattern),
                Deal.event_title.ilike(pattern),
            )
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_deal_events(db: AsyncSession, deal_id: int) -> list[DealEvent]:
    result = await db.execute(
        select(DealEvent)
        .where(DealEvent.deal_id == deal_id)
        .order_by(DealEvent.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_deal(db: AsyncSession, data: DealCreate) -> Deal:
    values = data.model_dump(mode="python")
    values["status"] = data.status.value
    values["priority"] = data.priority.value

    deal = Deal(**values)
    if deal.status == DealStatus.WON.value:
        deal.won_date = utcnow()
    db.add(deal)
    await db.flush()

    db.add(DealEvent(
        deal_id=deal.id,
        event_type=DealEventType.CREATED.value,
        details={"status": deal.status},
    ))
    await db.commit()
    await db.refresh(deal)

    logger.info("Created deal %d (%s)", deal.id, deal.event_title)
    return deal


async def update_deal(db: AsyncSession, deal_id: int, data: DealUpdate) -> Deal:
    """Apply a partial update and dispatch the won-transition side effect.

    Raises:
        DealNotFoundError: no deal with this id.
    """
    deal = await get_deal(db, deal_id)
    if deal is None:
        raise DealNotFoundError(deal_id)

    original_status = deal.status

    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    for field, value in changes.items():
        setattr(deal, field, value.value if hasattr(value, "value") else value)

    won_now = crosses_into_won(original_status, deal.status)
    if won_now:
        deal.won_date = utcnow()
    if deal.status != original_status:
        db.add(DealEvent(
            deal_id=deal.id,
            event_type=DealEventType.STATUS_CHANGED.value,
            details={"from_status": original_status, "to_status": deal.status},
        ))

    deal.updated_at = utcnow()
    await db.commit()
    await db.refresh(deal)
    logger.info("Updated deal %d (%s)", deal.id, ", ".join(sorted(changes)) or "no changes")

    if won_now:
        await create_project_for_won_deal(db, deal)

    return deal


async def create_project_for_won_deal(db: AsyncSession, deal: Deal) -> Project | None:
    """Synthesize and persist the project for a won deal.

    Never raises. On failure the session is rolled back, the error is logged
    and a project_creation_failed event is recorded for the deal.
    """
    deal_id = deal.id
    try:
        payload = synthesize_project(deal)
        values = payload.model_dump(mode="python")
        for key in ("project_type", "status", "priority", "event_classification"):
            values[key] = values[key].value
        project = Project(**values)
        db.add(project)
        await db.flush()

        db.add(DealEvent(
            deal_id=deal_id,
            event_type=DealEventType.PROJECT_CREATED.value,
            details={"project_id": project.id},
        ))
        await db.commit()
        await db.refresh(project)
        logger.info("Created project %d from won deal %d", project.id, deal_id)
        return project
    except Exception as e:
        logger.exception("Project creation failed for won deal %d", deal_id)
        await db.rollback()
        await _record_project_failure(db, deal_id, e)
        await db.refresh(deal)
        return None


async def _record_project_failure(db: AsyncSession, deal_id: int, error: Exception) -> None:
    try:
        db.add(DealEvent(
            deal_id=deal_id,
            event_type=DealEventType.PROJECT_CREATION_FAILED.value,
            details={"error": f"{type(error).__name__}: {error}"},
        ))
        await db.commit()
    except Exception:
        logger.exception("Could not record project failure for deal %d", deal_id)
        await db.rollback()


async def retry_project_creation(db: AsyncSession, deal_id: int) -> Project | None:
    """Re-run project synthesis for a won deal whose last attempt failed.

    Raises:
        DealNotFoundError: no deal with this id.
        ProjectRetryNotAllowedError: the deal is not won or already has a project.
    """
    deal = await get_deal(db, deal_id)
    if deal is None:
        raise DealNotFoundError(deal_id)
    if deal.status != DealStatus.WON.value:
        raise ProjectRetryNotAllowedError(f"Deal {deal_id} is not won (status: {deal.status})")

    outcomes = [
        e.event_type
        for e in await list_deal_events(db, deal_id)
        if e.event_type in (
            DealEventType.PROJECT_CREATED.value,
            DealEventType.PROJECT_CREATION_FAILED.value,
        )
    ]
    if DealEventType.PROJECT_CREATED.value in outcomes:
        raise ProjectRetryNotAllowedError(f"Deal {deal_id} already has a project")
    if not outcomes:
        raise ProjectRetryNotAllowedError(f"Deal {deal_id} has no failed project creation to retry")

    return await create_project_for_won_deal(db, deal)


async def delete_deal(db: AsyncSession, deal_id: int) -> bool:
    """Delete a deal and its audit events. Linked firm offers and projects are kept.

    Returns False if the deal does not exist.
    """
    deal = await get_deal(db, deal_id)
    if deal is None:
        return False
    await db.execute(delete(DealEvent).where(DealEvent.deal_id == deal_id))
    await db.delete(deal)
    await db.commit()
    logger.info("Deleted deal %d", deal_id)
    return True
