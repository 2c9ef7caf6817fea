"""Proposal persistence and the client-facing token flow (view, accept, reject)."""

import logging
import secrets

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from speaker_bureau.domain.enums import ProposalStatus
from speaker_bureau.domain.models import Proposal, utcnow
from speaker_bureau.domain.schemas import ProposalAccept, ProposalCreate, ProposalReject
from speaker_bureau.services.capability_tokens import new_access_token, token_prefix
from speaker_bureau.services.state_machines import validate_proposal_transition

logger = logging.getLogger(__name__)


def generate_proposal_number() -> str:
    """PROP-YYYYMMDD-XXXX, with a random hex suffix."""
    return f"PROP-{utcnow():%Y%m%d}-{secrets.token_hex(2).upper()}"


def proposal_link(base_url: str, proposal: Proposal) -> str:
    return f"{base_url.rstrip('/')}/proposal/{proposal.access_token}"


async def get_proposal(db: AsyncSession, proposal_id: int) -> Proposal | None:
    result = await db.execute(select(Proposal).where(Proposal.id == proposal_id))
    return result.scalar_one_or_none()


async def get_proposal_by_token(db: AsyncSession, token: str) -> Proposal | None:
    result = await db.execute(select(Proposal).where(Proposal.access_token == token))
    return result.scalar_one_or_none()


async def list_proposals(db: AsyncSession, status: str | None = None) -> list[Proposal]:
    stmt = select(Proposal).order_by(desc(Proposal.created_at), desc(Proposal.id))
    if status:
        stmt = stmt.where(Proposal.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_proposal(db: AsyncSession, data: ProposalCreate) -> Proposal:
    proposal = Proposal(
        proposal_number=generate_proposal_number(),
        status=ProposalStatus.DRAFT.value,
        access_token=new_access_token(),
        **data.model_dump(mode="python"),
    )
    db.add(proposal)
    await db.commit()
    await db.refresh(proposal)
    logger.info("Created proposal %s", proposal.proposal_number)
    return proposal


async def send_proposal(db: AsyncSession, proposal: Proposal) -> Proposal:
    """Mark a proposal sent. Re-sending a sent or viewed proposal refreshes sent_at."""
    validate_proposal_transition(proposal, ProposalStatus.SENT)
    proposal.status = ProposalStatus.SENT.value
    proposal.sent_at = utcnow()
    proposal.updated_at = utcnow()
    await db.commit()
    await db.refresh(proposal)
    logger.info("Proposal %s sent", proposal.proposal_number)
    return proposal


async def open_proposal(db: AsyncSession, token: str) -> Proposal | None:
    """Client view by token. The first view of a sent proposal marks it viewed.

    Drafts are readable but never stamped, since they have not been sent.
    """
    proposal = await get_proposal_by_token(db, token)
    if proposal is None:
        logger.warning("Proposal token %s not found", token_prefix(token))
        return None

    changed = False
    if proposal.viewed_at is None and proposal.status != ProposalStatus.DRAFT.value:
        proposal.viewed_at = utcnow()
        changed = True
    if proposal.status == ProposalStatus.SENT.value:
        proposal.status = ProposalStatus.VIEWED.value
        changed = True

    if changed:
        proposal.updated_at = utcnow()
        await db.commit()
        await db.refresh(proposal)
    return proposal


async def accept_proposal(db: AsyncSession, proposal: Proposal, data: ProposalAccept) -> Proposal:
    """Raises InvalidTransitionError when already decided or past valid_until."""
    validate_proposal_transition(proposal, ProposalStatus.ACCEPTED)
    proposal.status = ProposalStatus.ACCEPTED.value
    proposal.accepted_at = utcnow()
    proposal.accepted_by = data.accepted_by
    proposal.acceptance_notes = data.acceptance_notes
    proposal.updated_at = utcnow()
    await db.commit()
    await db.refresh(proposal)
    logger.info("Proposal %s accepted by %s", proposal.proposal_number, data.accepted_by)
    return proposal


async def reject_proposal(db: AsyncSession, proposal: Proposal, data: ProposalReject) -> Proposal:
    validate_proposal_transition(proposal, ProposalStatus.REJECTED)
    proposal.status = ProposalStatus.REJECTED.value
    proposal.rejected_at = utcnow()
    proposal.rejected_by = data.rejected_by
    proposal.rejection_reason = data.rejection_reason
    proposal.updated_at = utcnow()
    await db.commit()
    await db.refresh(proposal)
    logger.info("Proposal %s rejected", proposal.proposal_number)
    return proposal
