"""Unit tests for the proposal and speaker-confirmation state machines."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from speaker_bureau.domain.enums import ProposalStatus, SpeakerConfirmationState
from speaker_bureau.services.state_machines import (
    CONFIRMATION_TERMINAL_STATES,
    CONFIRMATION_TRANSITIONS,
    PROPOSAL_TRANSITIONS,
    InvalidTransitionError,
    confirmation_state,
    proposal_is_past_validity,
    validate_confirmation,
    validate_proposal_transition,
)

C = SpeakerConfirmationState
P = ProposalStatus


def _make_proposal(**kwargs):
    defaults = {"status": P.SENT.value, "valid_until": None}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


# ---------------------------------------------------------------------------
# Speaker confirmation
# ---------------------------------------------------------------------------


class TestConfirmationState:

    @pytest.mark.parametrize(
        "flag,expected",
        [(None, C.PENDING), (True, C.CONFIRMED), (False, C.DECLINED)],
    )
    def test_derived_from_flag(self, flag, expected):
        assert confirmation_state(SimpleNamespace(speaker_confirmed=flag)) == expected


class TestValidateConfirmation:

    @pytest.mark.parametrize("target", sorted(CONFIRMATION_TRANSITIONS[C.PENDING]))
    def test_pending_can_resolve(self, target):
        assert validate_confirmation(C.PENDING, target) is True

    @pytest.mark.parametrize(
        "current,target",
        [(t, s) for t in CONFIRMATION_TERMINAL_STATES for s in C],
    )
    def test_terminal_states_are_final(self, current, target):
        with pytest.raises(InvalidTransitionError, match="already responded"):
            validate_confirmation(current, target)

    def test_pending_to_pending_rejected(self):
        with pytest.raises(InvalidTransitionError, match="not allowed"):
            validate_confirmation(C.PENDING, C.PENDING)


# ---------------------------------------------------------------------------
# Proposals
# ---------------------------------------------------------------------------


class TestProposalTransitions:

    @pytest.mark.parametrize(
        "from_status,to_status",
        [(f, t) for f, targets in PROPOSAL_TRANSITIONS.items() for t in targets],
    )
    def test_all_valid_transitions(self, from_status, to_status):
        proposal = _make_proposal(status=from_status.value)
        assert validate_proposal_transition(proposal, to_status) is True

    def test_draft_cannot_be_accepted(self):
        with pytest.raises(InvalidTransitionError, match="not allowed"):
            validate_proposal_transition(_make_proposal(status="draft"), P.ACCEPTED)

    def test_expired_cannot_be_accepted(self):
        with pytest.raises(InvalidTransitionError, match="expired"):
            validate_proposal_transition(_make_proposal(status="expired"), P.ACCEPTED)

    def test_validity_window_blocks_accept_not_reject(self):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        proposal = _make_proposal(valid_until=past)

        with pytest.raises(InvalidTransitionError, match="expired"):
            validate_proposal_transition(proposal, P.ACCEPTED)
        assert validate_proposal_transition(proposal, P.REJECTED) is True


class TestProposalValidity:

    def test_no_valid_until_never_expires(self):
        assert proposal_is_past_validity(_make_proposal()) is False

    def test_naive_timestamp_treated_as_utc(self):
        now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
        proposal = _make_proposal(valid_until=datetime(2026, 6, 1, 11, 0))

        assert proposal_is_past_validity(proposal, now) is True
        assert proposal_is_past_validity(proposal, now - timedelta(hours=2)) is False
