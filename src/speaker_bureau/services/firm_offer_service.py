"""Firm Offer Service: admin edits, speaker-review link, and the confirmation latch."""

import logging

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.domain.enums import FirmOfferStatus, SpeakerConfirmationState
from speaker_bureau.domain.models import Deal, FirmOffer, Proposal, utcnow
from speaker_bureau.domain.schemas import (
    FirmOfferCreate,
    FirmOfferUpdate,
    ProposalSummary,
    SpeakerOfferEdit,
    SpeakerReviewResponse,
)
from speaker_bureau.services.capability_tokens import new_access_token, token_prefix
from speaker_bureau.services.state_machines import (
    CONFIRMATION_STATUS_LABELS,
    CONFIRMATION_TERMINAL_STATES,
    SPEAKER_RESPONSE_STATUSES,
    InvalidTransitionError,
    confirmation_state,
    validate_confirmation,
)

logger = logging.getLogger(__name__)

SECTION_FIELDS = (
    "event_overview",
    "speaker_program",
    "event_schedule",
    "technical_requirements",
    "travel_accommodation",
    "additional_info",
    "financial_details",
    "confirmation",
)

# Admin status changes that stamp a timestamp
STATUS_TIMESTAMPS = {
    FirmOfferStatus.SUBMITTED: "submitted_at",
    FirmOfferStatus.SENT_TO_SPEAKER: "sent_to_speaker_at",
}

# A speaker fill-in with all of these present completes the offer
REQUIRED_FIELDS = (
    ("event_overview", "company_name"),
    ("event_overview", "event_name"),
    ("event_overview", "event_date"),
    ("event_overview", "billing_contact", "name"),
    ("event_overview", "billing_contact", "email"),
    ("event_overview", "logistics_contact", "name"),
    ("event_overview", "logistics_contact", "email"),
    ("speaker_program", "speaker_name"),
    ("speaker_program", "program_topic"),
    ("financial_details", "speaker_fee"),
)


class FirmOfferError(ValueError):
    """Raised for a firm offer request that is malformed or conflicts with stored data."""


class FirmOfferService:
    """Manages FirmOffer records for the admin back office and the speaker link."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # -- reads --------------------------------------------------------------

    async def get(self, offer_id: int) -> FirmOffer | None:
        result = await self.db.execute(select(FirmOffer).where(FirmOffer.id == offer_id))
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> FirmOffer | None:
        result = await self.db.execute(
            select(FirmOffer).where(FirmOffer.speaker_access_token == token)
        )
        return result.scalar_one_or_none()

    async def list(self) -> list[FirmOffer]:
        result = await self.db.execute(
            select(FirmOffer).order_by(desc(FirmOffer.created_at), desc(FirmOffer.id))
        )
        return list(result.scalars().all())

    async def get_proposal(self, offer: FirmOffer) -> Proposal | None:
        if offer.proposal_id is None:
            return None
        result = await self.db.execute(select(Proposal).where(Proposal.id == offer.proposal_id))
        return result.scalar_one_or_none()

    # -- admin writes -------------------------------------------------------

    async def create(self, data: FirmOfferCreate) -> FirmOffer:
        """Create a draft offer with a fresh speaker token, linking the deal if given."""
        deal = None
        if data.deal_id is not None:
            result = await self.db.execute(select(Deal).where(Deal.id == data.deal_id))
            deal = result.scalar_one_or_none()
            if deal is None:
                raise FirmOfferError(f"Deal {data.deal_id} not found")

        if data.proposal_id is not None:
            result = await self.db.execute(
                select(Proposal).where(Proposal.id == data.proposal_id)
            )
            if result.scalar_one_or_none() is None:
                raise FirmOfferError(f"Proposal {data.proposal_id} not found")
            result = await self.db.execute(
                select(FirmOffer.id).where(FirmOffer.proposal_id == data.proposal_id)
            )
            if result.scalar_one_or_none() is not None:
                raise FirmOfferError(
                    f"Proposal {data.proposal_id} already has a firm offer"
                )

        offer = FirmOffer(
            proposal_id=data.proposal_id,
            status=FirmOfferStatus.DRAFT.value,
            speaker_access_token=new_access_token(),
            **{field: getattr(data, field) for field in SECTION_FIELDS},
        )
        self.db.add(offer)
        await self.db.flush()

        if deal is not None:
            deal.firm_offer_id = offer.id
            deal.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(offer)
        logger.info("Created firm offer %d (token %s)", offer.id, token_prefix(offer.speaker_access_token))
        return offer

    async def update(self, offer: FirmOffer, data: FirmOfferUpdate) -> FirmOffer:
        """Apply an admin PATCH.

        A body describing a speaker response (speaker_confirmed set, or a
        speaker_* status) goes through the confirmation latch. Once the
        speaker has responded, the status label and notes are frozen.
        """
        fields = data.model_dump(exclude_unset=True)
        target = self._requested_confirmation(data)

        for field in SECTION_FIELDS:
            if fields.get(field) is not None:
                setattr(offer, field, fields[field])

        if target is not None:
            self._apply_response(offer, target, data.speaker_notes)
        else:
            terminal = confirmation_state(offer) in CONFIRMATION_TERMINAL_STATES
            if data.status is not None:
                if terminal:
                    raise InvalidTransitionError(
                        offer.status,
                        data.status.value,
                        "Speaker has already responded; status is final",
                    )
                offer.status = data.status.value
                stamp = STATUS_TIMESTAMPS.get(data.status)
                if stamp:
                    setattr(offer, stamp, utcnow())
            if data.speaker_notes is not None:
                if terminal:
                    raise InvalidTransitionError(
                        offer.status,
                        offer.status,
                        "Speaker notes are final once the speaker has responded",
                    )
                offer.speaker_notes = data.speaker_notes

        offer.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(offer)
        return offer

    async def send_to_speaker(self, offer: FirmOffer, base_url: str) -> str:
        """Mark the offer sent and return the speaker review URL."""
        if confirmation_state(offer) in CONFIRMATION_TERMINAL_STATES:
            raise InvalidTransitionError(
                offer.status,
                FirmOfferStatus.SENT_TO_SPEAKER.value,
                "Speaker has already responded",
            )
        offer.status = FirmOfferStatus.SENT_TO_SPEAKER.value
        offer.sent_to_speaker_at = utcnow()
        offer.updated_at = utcnow()
        await self.db.commit()

        url = f"{base_url.rstrip('/')}/speaker-review/{offer.speaker_access_token}"
        logger.info("Firm offer %d sent to speaker", offer.id)
        return url

    async def delete(self, offer: FirmOffer) -> None:
        # Deals keep their firm_offer_id link pointing at nothing; clear it first.
        result = await self.db.execute(select(Deal).where(Deal.firm_offer_id == offer.id))
        for deal in result.scalars().all():
            deal.firm_offer_id = None
        await self.db.delete(offer)
        await self.db.commit()
        logger.info("Deleted firm offer %d", offer.id)

    # -- speaker side (token is the credential) -----------------------------

    async def open_for_speaker(self, token: str) -> FirmOffer | None:
        """Look up an offer by speaker token and stamp the first view.

        A sent offer moves to viewed.
        """
        offer = await self.get_by_token(token)
        if offer is None:
            logger.warning("Speaker review token %s not found", token_prefix(token))
            return None

        changed = False
        if offer.speaker_viewed_at is None:
            offer.speaker_viewed_at = utcnow()
            changed = True
            logger.info("Firm offer %d first viewed by speaker", offer.id)
        if offer.status == FirmOfferStatus.SENT_TO_SPEAKER.value:
            offer.status = FirmOfferStatus.VIEWED.value
            changed = True

        if changed:
            offer.updated_at = utcnow()
            await self.db.commit()
            await self.db.refresh(offer)
        return offer

    async def fill_in(self, offer: FirmOffer, data: SpeakerOfferEdit) -> FirmOffer:
        """Save sections from the speaker link.

        With every REQUIRED_FIELDS entry present the offer becomes completed
        (speaker_response_at is stamped the first time); otherwise it is viewed.
        Raises InvalidTransitionError once the speaker has confirmed or declined.
        """
        if confirmation_state(offer) in CONFIRMATION_TERMINAL_STATES:
            raise InvalidTransitionError(
                offer.status,
                offer.status,
                "Speaker has already responded; the offer can no longer be edited",
            )

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(offer, field, value)

        was_complete = offer.status == FirmOfferStatus.COMPLETED.value
        if missing_fields(offer):
            offer.status = FirmOfferStatus.VIEWED.value
        else:
            offer.status = FirmOfferStatus.COMPLETED.value
            if not was_complete:
                offer.speaker_response_at = utcnow()
                logger.info("Firm offer %d completed by speaker", offer.id)

        offer.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(offer)
        return offer

    async def respond(
        self, offer: FirmOffer, confirmed: bool, notes: str | None = None
    ) -> FirmOffer:
        """Confirm or decline on behalf of the speaker. One-way; raises if already answered."""
        target = (
            SpeakerConfirmationState.CONFIRMED
            if confirmed
            else SpeakerConfirmationState.DECLINED
        )
        self._apply_response(offer, target, notes)
        offer.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(offer)
        return offer

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _requested_confirmation(data: FirmOfferUpdate) -> SpeakerConfirmationState | None:
        from_flag = None
        if data.speaker_confirmed is not None:
            from_flag = (
                SpeakerConfirmationState.CONFIRMED
                if data.speaker_confirmed
                else SpeakerConfirmationState.DECLINED
            )

        from_status = None
        if data.status in SPEAKER_RESPONSE_STATUSES:
            from_status = next(
                state
                for state, label in CONFIRMATION_STATUS_LABELS.items()
                if label == data.status
            )

        if from_flag and data.status is not None and from_status is None:
            raise FirmOfferError(
                f"status '{data.status.value}' cannot be combined with speaker_confirmed"
            )
        if from_flag and from_status and from_flag != from_status:
            raise FirmOfferError(
                f"status '{data.status.value}' contradicts speaker_confirmed={data.speaker_confirmed}"
            )
        return from_flag or from_status

    @staticmethod
    def _apply_response(
        offer: FirmOffer, target: SpeakerConfirmationState, notes: str | None
    ) -> None:
        validate_confirmation(confirmation_state(offer), target)
        offer.speaker_confirmed = target == SpeakerConfirmationState.CONFIRMED
        offer.status = CONFIRMATION_STATUS_LABELS[target].value
        offer.speaker_response_at = utcnow()
        if notes is not None:
            offer.speaker_notes = notes
        logger.info("Firm offer %d speaker response: %s", offer.id, target.value)


def missing_fields(offer: FirmOffer) -> list[str]:
    """Dotted paths of REQUIRED_FIELDS that are empty on the offer."""
    missing = []
    for path in REQUIRED_FIELDS:
        value = getattr(offer, path[0]) or {}
        for key in path[1:]:
            value = value.get(key) if isinstance(value, dict) else None
        if not value:
            missing.append(".".join(path))
    return missing


def build_speaker_review(offer: FirmOffer, proposal: Proposal | None) -> SpeakerReviewResponse:
    """Speaker-facing view: the action form while pending, a read-only summary after."""
    state = confirmation_state(offer)
    pending = state == SpeakerConfirmationState.PENDING

    summary = None
    if proposal is not None:
        speakers = proposal.speakers or []
        primary = speakers[0] if speakers else {}
        summary = ProposalSummary(
            title=proposal.title,
            client_name=proposal.client_name,
            client_company=proposal.client_company,
            event_title=proposal.event_title,
            event_date=proposal.event_date,
            event_location=proposal.event_location,
            speaker_name=primary.get("name") or "Speaker",
        )

    return SpeakerReviewResponse(
        id=offer.id,
        status=offer.status,
        confirmation_state=state,
        can_respond=pending,
        view_mode="form" if pending else "summary",
        **{field: getattr(offer, field) or {} for field in SECTION_FIELDS},
        speaker_confirmed=offer.speaker_confirmed,
        speaker_notes=offer.speaker_notes,
        speaker_viewed_at=offer.speaker_viewed_at,
        speaker_response_at=offer.speaker_response_at,
        missing_fields=missing_fields(offer),
        proposal=summary,
    )
