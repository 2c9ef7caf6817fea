"""Proposal API.

Two routers: the admin back office (/api/proposals) and the public client
link (/api/proposal/{token}), where the token is the only credential.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.config import get_settings
from speaker_bureau.app.errors import ApiError, parse_id
from speaker_bureau.app.routes.auth import get_current_admin
from speaker_bureau.domain.schemas import (
    ProposalAccept,
    ProposalCreate,
    ProposalReject,
    ProposalResponse,
    ProposalSendResult,
)
from speaker_bureau.infra.database import get_db
from speaker_bureau.services import proposal_service
from speaker_bureau.services.state_machines import InvalidTransitionError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/proposals",
    tags=["proposals"],
    dependencies=[Depends(get_current_admin)],
)
public_router = APIRouter(prefix="/api/proposal", tags=["proposal-public"])


async def _get_by_token_or_404(db: AsyncSession, token: str):
    proposal = await proposal_service.get_proposal_by_token(db, token)
    if proposal is None:
        raise ApiError(404, "Proposal not found")
    return proposal


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ProposalResponse])
async def list_proposals(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await proposal_service.list_proposals(db, status=status)


@router.post("", response_model=ProposalResponse, status_code=201)
async def create_proposal(data: ProposalCreate, db: AsyncSession = Depends(get_db)):
    if not data.client_name.strip():
        raise ApiError(400, "Missing required fields", ["client_name"])
    return await proposal_service.create_proposal(db, data)


@router.get("/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(proposal_id: str, db: AsyncSession = Depends(get_db)):
    proposal = await proposal_service.get_proposal(db, parse_id(proposal_id, "proposal"))
    if proposal is None:
        raise ApiError(404, "Proposal not found")
    return proposal


@router.post("/{proposal_id}/send", response_model=ProposalSendResult)
async def send_proposal(proposal_id: str, db: AsyncSession = Depends(get_db)):
    proposal = await proposal_service.get_proposal(db, parse_id(proposal_id, "proposal"))
    if proposal is None:
        raise ApiError(404, "Proposal not found")
    try:
        proposal = await proposal_service.send_proposal(db, proposal)
    except InvalidTransitionError as e:
        raise ApiError(409, "Proposal cannot be sent", e.reason)

    return ProposalSendResult(
        message=f"Proposal {proposal.proposal_number} marked as sent",
        link=proposal_service.proposal_link(get_settings().public_base_url, proposal),
    )


# ---------------------------------------------------------------------------
# Public (token)
# ---------------------------------------------------------------------------


@public_router.get("/{token}", response_model=ProposalResponse)
async def view_proposal(token: str, db: AsyncSession = Depends(get_db)):
    proposal = await proposal_service.open_proposal(db, token)
    if proposal is None:
        raise ApiError(404, "Proposal not found")
    return proposal


@public_router.post("/{token}/accept")
async def accept_proposal(
    token: str, data: ProposalAccept, db: AsyncSession = Depends(get_db)
):
    proposal = await _get_by_token_or_404(db, token)
    try:
        await proposal_service.accept_proposal(db, proposal, data)
    except InvalidTransitionError as e:
        raise ApiError(400, e.reason)
    return {"success": True, "message": "Proposal accepted successfully"}


@public_router.post("/{token}/reject")
async def reject_proposal(
    token: str, data: ProposalReject, db: AsyncSession = Depends(get_db)
):
    proposal = await _get_by_token_or_404(db, token)
    try:
        await proposal_service.reject_proposal(db, proposal, data)
    except InvalidTransitionError as e:
        raise ApiError(400, e.reason)
    return {"success": True, "message": "Proposal rejected"}
