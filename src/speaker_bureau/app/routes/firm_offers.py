"""Firm offer admin API: CRUD, send-to-speaker and latch-guarded updates."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.app.config import get_settings
from speaker_bureau.app.errors import ApiError, parse_id
from speaker_bureau.app.routes.auth import get_current_admin
from speaker_bureau.domain.models import FirmOffer
from speaker_bureau.domain.schemas import (
    FirmOfferCreate,
    FirmOfferResponse,
    FirmOfferUpdate,
    SpeakerSend,
    SpeakerSendResult,
)
from speaker_bureau.infra.database import get_db
from speaker_bureau.services.firm_offer_service import FirmOfferError, FirmOfferService
from speaker_bureau.services.state_machines import InvalidTransitionError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/firm-offers",
    tags=["firm-offers"],
    dependencies=[Depends(get_current_admin)],
)


async def _get_offer_or_404(service: FirmOfferService, raw_id: str) -> FirmOffer:
    offer = await service.get(parse_id(raw_id, "firm offer"))
    if offer is None:
        raise ApiError(404, "Firm offer not found", f"No firm offer with id {raw_id}")
    return offer


@router.get("", response_model=list[FirmOfferResponse])
async def list_firm_offers(db: AsyncSession = Depends(get_db)):
    return await FirmOfferService(db).list()


@router.post("", response_model=FirmOfferResponse, status_code=201)
async def create_firm_offer(data: FirmOfferCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await FirmOfferService(db).create(data)
    except FirmOfferError as e:
        raise ApiError(400, "Invalid firm offer", str(e))


@router.get("/{offer_id}", response_model=FirmOfferResponse)
async def get_firm_offer(offer_id: str, db: AsyncSession = Depends(get_db)):
    return await _get_offer_or_404(FirmOfferService(db), offer_id)


@router.patch("/{offer_id}", response_model=FirmOfferResponse)
async def update_firm_offer(
    offer_id: str, data: FirmOfferUpdate, db: AsyncSession = Depends(get_db)
):
    service = FirmOfferService(db)
    offer = await _get_offer_or_404(service, offer_id)
    try:
        return await service.update(offer, data)
    except InvalidTransitionError as e:
        await db.rollback()
        raise ApiError(409, "Firm offer is locked", e.reason)
    except FirmOfferError as e:
        await db.rollback()
        raise ApiError(400, "Invalid firm offer update", str(e))


@router.delete("/{offer_id}")
async def delete_firm_offer(offer_id: str, db: AsyncSession = Depends(get_db)):
    service = FirmOfferService(db)
    offer = await _get_offer_or_404(service, offer_id)
    await service.delete(offer)
    return {"message": "Firm offer deleted successfully"}


@router.post("/{offer_id}/send-to-speaker", response_model=SpeakerSendResult)
async def send_to_speaker(
    offer_id: str,
    data: SpeakerSend | None = None,
    db: AsyncSession = Depends(get_db),
):
    service = FirmOfferService(db)
    offer = await _get_offer_or_404(service, offer_id)
    try:
        url = await service.send_to_speaker(offer, get_settings().public_base_url)
    except InvalidTransitionError as e:
        raise ApiError(409, "Firm offer is locked", e.reason)

    recipient = (data.speaker_name or data.speaker_email) if data else None
    message = f"Speaker review link created for {recipient}" if recipient else "Speaker review link created"
    return SpeakerSendResult(message=message, speaker_review_url=url, firm_offer_id=offer.id)
