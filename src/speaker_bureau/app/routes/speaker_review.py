"""Public speaker review link: view a firm offer, fill it in, and confirm or decline it.

No login here. Holding the speaker_access_token is the authorization.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.errors import ApiError
from speaker_bureau.domain.schemas import (
    SpeakerOfferEdit,
    SpeakerResponse,
    SpeakerReviewResponse,
)
from speaker_bureau.infra.database import get_db
from speaker_bureau.services.firm_offer_service import FirmOfferService, build_speaker_review
from speaker_bureau.services.state_machines import InvalidTransitionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/speaker-review", tags=["speaker-review"])


@router.get("/{token}", response_model=SpeakerReviewResponse)
async def view_firm_offer(token: str, db: AsyncSession = Depends(get_db)):
    service = FirmOfferService(db)
    offer = await service.open_for_speaker(token)
    if offer is None:
        raise ApiError(404, "Firm offer not found")
    return build_speaker_review(offer, await service.get_proposal(offer))


@router.put("/{token}", response_model=SpeakerReviewResponse)
async def fill_in_firm_offer(
    token: str, data: SpeakerOfferEdit, db: AsyncSession = Depends(get_db)
):
    """Save the speaker's section edits; a fully filled offer becomes completed."""
    service = FirmOfferService(db)
    offer = await service.get_by_token(token)
    if offer is None:
        raise ApiError(404, "Firm offer not found")
    try:
        offer = await service.fill_in(offer, data)
    except InvalidTransitionError as e:
        raise ApiError(409, "Speaker has already responded", e.reason)
    return build_speaker_review(offer, await service.get_proposal(offer))


@router.post("/{token}/respond", response_model=SpeakerReviewResponse)
async def respond(token: str, data: SpeakerResponse, db: AsyncSession = Depends(get_db)):
    service = FirmOfferService(db)
    offer = await service.get_by_token(token)
    if offer is None:
        raise ApiError(404, "Firm offer not found")
    try:
        offer = await service.respond(offer, data.speaker_confirmed, data.speaker_notes)
    except InvalidTransitionError as e:
        raise ApiError(409, "Speaker has already responded", e.reason)
    return build_speaker_review(offer, await service.get_proposal(offer))
