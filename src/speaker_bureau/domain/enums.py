"""Domain enumerations for the speaker bureau back office.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Sales pipeline
# ---------------------------------------------------------------------------


class DealStatus(str, Enum):
    """Stage of a deal in the sales pipeline.

    Storage does not constrain the order; any stage may follow any other.
    """

    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class Priority(str, Enum):
    """Priority shared by deals and projects."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class DealEventType(str, Enum):
    """Type of event in the deal audit trail."""

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    PROJECT_CREATED = "project_created"
    PROJECT_CREATION_FAILED = "project_creation_failed"


# ---------------------------------------------------------------------------
# Operations (projects)
# ---------------------------------------------------------------------------


class ProjectType(str, Enum):
    WORKSHOP = "Workshop"
    SPEAKING = "Speaking"
    CONSULTING = "Consulting"
    OTHER = "Other"


class ProjectStatus(str, Enum):
    """Project pipeline stage, keyed on how far out the event is."""

    TWO_PLUS_MONTHS = "2plus_months"
    ONE_TO_TWO_MONTHS = "1to2_months"
    LESS_THAN_MONTH = "less_than_month"
    FINAL_WEEK = "final_week"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventClassification(str, Enum):
    VIRTUAL = "virtual"
    LOCAL = "local"
    TRAVEL = "travel"


# ---------------------------------------------------------------------------
# Proposals and firm offers
# ---------------------------------------------------------------------------


class ProposalStatus(str, Enum):
    """Lifecycle of a client-facing proposal."""

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class FirmOfferStatus(str, Enum):
    """Status label of a firm offer.

    The speaker_* labels mirror the speaker confirmation latch and are only
    written by the confirmation transition. viewed and completed are set from
    the speaker link: first open, and a fill-in with every required field.
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    SENT_TO_SPEAKER = "sent_to_speaker"
    VIEWED = "viewed"
    COMPLETED = "completed"
    SPEAKER_CONFIRMED = "speaker_confirmed"
    SPEAKER_DECLINED = "speaker_declined"


class SpeakerConfirmationState(str, Enum):
    """Speaker response to a firm offer, derived from speaker_confirmed."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
