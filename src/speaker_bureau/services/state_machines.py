"""Proposal and firm-offer state machines: validate transitions and expose terminal sets.

Deals have no state machine: their status is free-form on the
pipeline board, and only the * -> won edge has a side effect (deal_service).
"""

from datetime import datetime, timezone

from speaker_bureau.domain.enums import (
    FirmOfferStatus,
    ProposalStatus,
    SpeakerConfirmationState,
)


class InvalidTransitionError(Exception):
    """Raised when a state transition is not allowed."""

    def __init__(self, current_status: str, target_status: str, reason: str):
        self.current_status = current_status
        self.target_status = target_status
        self.reason = reason
        super().__init__(
            f"Invalid transition from {current_status} to {target_status}: {reason}"
        )


def _value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


# ---------------------------------------------------------------------------
# Firm offer: speaker confirmation latch
# ---------------------------------------------------------------------------

C = SpeakerConfirmationState

CONFIRMATION_TRANSITIONS: dict[SpeakerConfirmationState, set[SpeakerConfirmationState]] = {
    C.PENDING: {C.CONFIRMED, C.DECLINED},
}

CONFIRMATION_TERMINAL_STATES: set[SpeakerConfirmationState] = {C.CONFIRMED, C.DECLINED}

# Status label written alongside each terminal confirmation state
CONFIRMATION_STATUS_LABELS: dict[SpeakerConfirmationState, FirmOfferStatus] = {
    C.CONFIRMED: FirmOfferStatus.SPEAKER_CONFIRMED,
    C.DECLINED: FirmOfferStatus.SPEAKER_DECLINED,
}

SPEAKER_RESPONSE_STATUSES: set[FirmOfferStatus] = set(CONFIRMATION_STATUS_LABELS.values())


def confirmation_state(offer) -> SpeakerConfirmationState:
    """Derive the confirmation state from offer.speaker_confirmed (None = pending)."""
    if offer.speaker_confirmed is None:
        return C.PENDING
    return C.CONFIRMED if offer.speaker_confirmed else C.DECLINED


def validate_confirmation(
    current: SpeakerConfirmationState,
    target: SpeakerConfirmationState,
) -> bool:
    """Return True if the speaker may move from current to target. Raise otherwise."""
    allowed = CONFIRMATION_TRANSITIONS.get(current)
    if allowed is None:
        raise InvalidTransitionError(
            current.value,
            target.value,
            f"Speaker has already responded ({current.value})",
        )
    if target not in allowed:
        raise InvalidTransitionError(
            current.value,
            target.value,
            f"Transition from {current.value} to {target.value} is not allowed",
        )
    return True


# ---------------------------------------------------------------------------
# Proposal lifecycle
# ---------------------------------------------------------------------------

P = ProposalStatus

PROPOSAL_TRANSITIONS: dict[ProposalStatus, set[ProposalStatus]] = {
    P.DRAFT: {P.SENT},
    P.SENT: {P.SENT, P.VIEWED, P.ACCEPTED, P.REJECTED, P.EXPIRED},
    P.VIEWED: {P.SENT, P.ACCEPTED, P.REJECTED, P.EXPIRED},
}

PROPOSAL_TERMINAL_STATES: set[ProposalStatus] = {P.ACCEPTED, P.REJECTED, P.EXPIRED}


def proposal_is_past_validity(proposal, now: datetime | None = None) -> bool:
    """Return True if proposal.valid_until has passed."""
    if proposal.valid_until is None:
        return False
    now = now or datetime.now(timezone.utc)
    valid_until = proposal.valid_until
    if valid_until.tzinfo is None:
        valid_until = valid_until.replace(tzinfo=timezone.utc)
    return now > valid_until


def validate_proposal_transition(proposal, target: ProposalStatus) -> bool:
    """Return True if the proposal may move to target. Raise InvalidTransitionError if not.

    Checks, in the order the client sees them:
    1. Already accepted / rejected proposals are final.
    2. Acceptance is blocked once valid_until has passed.
    3. The transition is in PROPOSAL_TRANSITIONS.
    """
    current = P(_value(proposal.status))

    if current == P.ACCEPTED:
        raise InvalidTransitionError(
            current.value, target.value, "Proposal has already been accepted"
        )
    if current == P.REJECTED:
        reason = (
            "Proposal has already been rejected"
            if target == P.REJECTED
            else "Proposal has been rejected"
        )
        raise InvalidTransitionError(current.value, target.value, reason)

    if target == P.ACCEPTED and (current == P.EXPIRED or proposal_is_past_validity(proposal)):
        raise InvalidTransitionError(current.value, target.value, "Proposal has expired")

    allowed = PROPOSAL_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidTransitionError(
            current.value,
            target.value,
            f"Transition from {current.value} to {target.value} is not allowed",
        )
    return True
