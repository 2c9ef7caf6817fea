"""Deal pipeline API: CRUD, audit trail and project retry for won deals."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.errors import ApiError, parse_id
from speaker_bureau.app.routes.auth import get_current_admin
from speaker_bureau.domain.schemas import (
    DealCreate,
    DealEventResponse,
    DealResponse,
    DealUpdate,
    ProjectResponse,
)
from speaker_bureau.infra.database import get_db
from speaker_bureau.services import deal_service
from speaker_bureau.services.deal_service import (
    DealNotFoundError,
    ProjectRetryNotAllowedError,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/deals",
    tags=["deals"],
    dependencies=[Depends(get_current_admin)],
)


async def _get_deal_or_404(db: AsyncSession, deal_id: int):
    deal = await deal_service.get_deal(db, deal_id)
    if deal is None:
        raise ApiError(404, "Deal not found", f"No deal with id {deal_id}")
    return deal


@router.get("", response_model=list[DealResponse])
async def list_deals(
    status: str | None = Query(None),
    q: str | None = Query(None, description="Search client name, company or event title"),
    db: AsyncSession = Depends(get_db),
):
    return await deal_service.list_deals(db, status=status, search=q)


@router.post("", response_model=DealResponse, status_code=201)
async def create_deal(data: DealCreate, db: AsyncSession = Depends(get_db)):
    missing = [
        field for field in ("client_name", "event_title")
        if not getattr(data, field).strip()
    ]
    if missing:
        raise ApiError(400, "Missing required fields", missing)
    return await deal_service.create_deal(db, data)


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(deal_id: str, db: AsyncSession = Depends(get_db)):
    return await _get_deal_or_404(db, parse_id(deal_id, "deal"))


@router.put("/{deal_id}", response_model=DealResponse)
@router.patch("/{deal_id}", response_model=DealResponse)
async def update_deal(deal_id: str, data: DealUpdate, db: AsyncSession = Depends(get_db)):
    """Partial update. Moving a deal into "won" also creates its project.

    A failed project creation does not fail this request; it shows up in the
    deal's events as project_creation_failed and can be retried.
    """
    try:
        return await deal_service.update_deal(db, parse_id(deal_id, "deal"), data)
    except DealNotFoundError as e:
        raise ApiError(404, "Deal not found", str(e))


@router.delete("/{deal_id}")
async def delete_deal(deal_id: str, db: AsyncSession = Depends(get_db)):
    deleted = await deal_service.delete_deal(db, parse_id(deal_id, "deal"))
    if not deleted:
        raise ApiError(404, "Deal not found", f"No deal with id {deal_id}")
    return {"message": "Deal deleted successfully"}


@router.get("/{deal_id}/events", response_model=list[DealEventResponse])
async def list_deal_events(deal_id: str, db: AsyncSession = Depends(get_db)):
    deal = await _get_deal_or_404(db, parse_id(deal_id, "deal"))
    return await deal_service.list_deal_events(db, deal.id)


@router.post("/{deal_id}/retry-project", response_model=ProjectResponse, status_code=201)
async def retry_project(deal_id: str, db: AsyncSession = Depends(get_db)):
    try:
        project = await deal_service.retry_project_creation(db, parse_id(deal_id, "deal"))
    except DealNotFoundError as e:
        raise ApiError(404, "Deal not found", str(e))
    except ProjectRetryNotAllowedError as e:
        raise ApiError(409, "Project retry not allowed", str(e))

    if project is None:
        raise ApiError(500, "Project creation failed", "See the deal's events for the error")
    return project
