"""Pydantic v2 schemas for API request/response validation."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from speaker_bureau.domain.enums import (
    DealStatus,
    EventClassification,
    FirmOfferStatus,
    Priority,
    ProjectStatus,
    ProjectType,
    SpeakerConfirmationState,
)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AdminLogin(BaseModel):
    """Schema for admin login."""

    email: str
    password: str


class AdminResponse(BaseModel):
    """Schema for admin user API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str
    is_active: bool


class TokenResponse(BaseModel):
    """Schema for JWT token responses."""

    access_token: str
    token_type: str = "bearer"
    user: AdminResponse


# ---------------------------------------------------------------------------
# Deals
# ---------------------------------------------------------------------------


class DealCreate(BaseModel):
    """Schema for creating a deal from the sales entry form.

    client_name and event_title are checked by the route so the caller gets
    the single combined "missing required fields" message.
    """

    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    company: str = ""
    event_title: str = ""
    event_date: date | None = None
    event_location: str = ""
    event_type: str = ""
    speaker_requested: str | None = None
    attendee_count: int = 0
    budget_range: str = ""
    deal_value: float = 0.0
    status: DealStatus = DealStatus.LEAD
    priority: Priority = Priority.MEDIUM
    source: str = ""
    notes: str = ""
    last_contact: date | None = None
    next_follow_up: date | None = None


class DealUpdate(BaseModel):
    """Partial deal update. Fields left unset or null keep their stored value."""

    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    company: str | None = None
    event_title: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    event_type: str | None = None
    speaker_requested: str | None = None
    attendee_count: int | None = None
    budget_range: str | None = None
    deal_value: float | None = None
    status: DealStatus | None = None
    priority: Priority | None = None
    source: str | None = None
    notes: str | None = None
    last_contact: date | None = None
    next_follow_up: date | None = None


class DealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_name: str
    client_email: str | None = None
    client_phone: str | None = None
    company: str | None = None
    event_title: str
    event_date: date | None = None
    event_location: str | None = None
    event_type: str | None = None
    speaker_requested: str | None = None
    attendee_count: int | None = None
    budget_range: str | None = None
    deal_value: float | None = None
    status: str
    priority: str
    source: str | None = None
    notes: str | None = None
    last_contact: date | None = None
    next_follow_up: date | None = None
    won_date: datetime | None = None
    firm_offer_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DealEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    event_type: str
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ProjectCreate(BaseModel):
    """Creation payload for a project. Produced by synthesis from a won deal."""

    project_name: str
    client_name: str
    client_email: str = ""
    client_phone: str = ""
    company: str = ""
    project_type: ProjectType = ProjectType.OTHER
    description: str = ""
    status: ProjectStatus = ProjectStatus.TWO_PLUS_MONTHS
    priority: Priority = Priority.MEDIUM
    start_date: date | None = None
    end_date: date | None = None
    deadline: date | None = None
    budget: float = 0.0
    spent: float = 0.0
    completion_percentage: int = 0

    billing_contact_name: str = ""
    billing_contact_email: str = ""
    billing_contact_phone: str = ""
    logistics_contact_name: str = ""
    logistics_contact_email: str = ""
    logistics_contact_phone: str = ""

    event_name: str = ""
    event_date: date | None = None
    event_location: str = ""
    event_type: str = ""
    event_classification: EventClassification = EventClassification.LOCAL
    attendee_count: int = 0
    audience_size: int = 0
    requested_speaker_name: str = ""
    program_topic: str = ""

    contract_signed: bool = False
    invoice_sent: bool = False
    payment_received: bool = False
    presentation_ready: bool = False
    materials_sent: bool = False

    notes: str = ""


class ProjectUpdate(BaseModel):
    """Admin edits to a project's tracking state."""

    status: ProjectStatus | None = None
    priority: Priority | None = None
    budget: float | None = None
    spent: float | None = None
    completion_percentage: int | None = Field(default=None, ge=0, le=100)
    contract_signed: bool | None = None
    invoice_sent: bool | None = None
    payment_received: bool | None = None
    presentation_ready: bool | None = None
    materials_sent: bool | None = None
    notes: str | None = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_name: str
    client_name: str
    client_email: str | None = None
    client_phone: str | None = None
    company: str | None = None
    project_type: str
    description: str | None = None
    status: str
    priority: str
    start_date: date | None = None
    end_date: date | None = None
    deadline: date | None = None
    budget: float | None = None
    spent: float | None = None
    completion_percentage: int | None = None
    billing_contact_name: str | None = None
    billing_contact_email: str | None = None
    billing_contact_phone: str | None = None
    logistics_contact_name: str | None = None
    logistics_contact_email: str | None = None
    logistics_contact_phone: str | None = None
    event_name: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    event_type: str | None = None
    event_classification: str | None = None
    attendee_count: int | None = None
    audience_size: int | None = None
    requested_speaker_name: str | None = None
    program_topic: str | None = None
    contract_signed: bool = False
    invoice_sent: bool = False
    payment_received: bool = False
    presentation_ready: bool = False
    materials_sent: bool = False
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None


class StatusUpdateResult(BaseModel):
    """Outcome of a bulk project status recomputation."""

    success: bool = True
    message: str
    updated: int
    errors: int


# ---------------------------------------------------------------------------
# Proposals
# ---------------------------------------------------------------------------


class ProposalCreate(BaseModel):
    title: str | None = None
    deal_id: int | None = None
    client_name: str
    client_email: str | None = None
    client_company: str | None = None
    event_title: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    speakers: list[dict[str, Any]] = Field(default_factory=list)
    total_investment: float = 0.0
    valid_until: datetime | None = None
    created_by: str | None = None


class ProposalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    proposal_number: str
    title: str | None = None
    deal_id: int | None = None
    client_name: str
    client_email: str | None = None
    client_company: str | None = None
    event_title: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    speakers: list[dict[str, Any]] = Field(default_factory=list)
    total_investment: float | None = None
    status: str
    access_token: str
    valid_until: datetime | None = None
    created_by: str | None = None
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    accepted_at: datetime | None = None
    accepted_by: str | None = None
    acceptance_notes: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProposalAccept(BaseModel):
    accepted_by: str
    acceptance_notes: str | None = None


class ProposalReject(BaseModel):
    rejected_by: str | None = None
    rejection_reason: str | None = None


class ProposalSendResult(BaseModel):
    success: bool = True
    message: str
    link: str


# ---------------------------------------------------------------------------
# Firm offers
# ---------------------------------------------------------------------------


class FirmOfferCreate(BaseModel):
    """Schema for creating a firm offer. deal_id, when given, links the deal to it."""

    proposal_id: int | None = None
    deal_id: int | None = None
    event_overview: dict[str, Any] = Field(default_factory=dict)
    speaker_program: dict[str, Any] = Field(default_factory=dict)
    event_schedule: dict[str, Any] = Field(default_factory=dict)
    technical_requirements: dict[str, Any] = Field(default_factory=dict)
    travel_accommodation: dict[str, Any] = Field(default_factory=dict)
    additional_info: dict[str, Any] = Field(default_factory=dict)
    financial_details: dict[str, Any] = Field(default_factory=dict)
    confirmation: dict[str, Any] = Field(default_factory=dict)


class FirmOfferUpdate(BaseModel):
    """Partial firm offer update.

    Sections replace the stored section wholesale. status/speaker_confirmed/
    speaker_notes go through the confirmation latch when they describe a
    speaker response.
    """

    status: FirmOfferStatus | None = None
    speaker_confirmed: bool | None = None
    speaker_notes: str | None = None
    event_overview: dict[str, Any] | None = None
    speaker_program: dict[str, Any] | None = None
    event_schedule: dict[str, Any] | None = None
    technical_requirements: dict[str, Any] | None = None
    travel_accommodation: dict[str, Any] | None = None
    additional_info: dict[str, Any] | None = None
    financial_details: dict[str, Any] | None = None
    confirmation: dict[str, Any] | None = None


class FirmOfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    proposal_id: int | None = None
    status: str
    speaker_access_token: str
    event_overview: dict[str, Any] = Field(default_factory=dict)
    speaker_program: dict[str, Any] = Field(default_factory=dict)
    event_schedule: dict[str, Any] = Field(default_factory=dict)
    technical_requirements: dict[str, Any] = Field(default_factory=dict)
    travel_accommodation: dict[str, Any] = Field(default_factory=dict)
    additional_info: dict[str, Any] = Field(default_factory=dict)
    financial_details: dict[str, Any] = Field(default_factory=dict)
    confirmation: dict[str, Any] = Field(default_factory=dict)
    speaker_confirmed: bool | None = None
    speaker_notes: str | None = None
    speaker_viewed_at: datetime | None = None
    speaker_response_at: datetime | None = None
    submitted_at: datetime | None = None
    sent_to_speaker_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SpeakerSend(BaseModel):
    speaker_email: str | None = None
    speaker_name: str | None = None


class SpeakerSendResult(BaseModel):
    success: bool = True
    message: str
    speaker_review_url: str
    firm_offer_id: int


class SpeakerResponse(BaseModel):
    """Body posted from the speaker review page."""

    speaker_confirmed: bool
    speaker_notes: str | None = None


class SpeakerOfferEdit(BaseModel):
    """Sections filled in by the speaker-link holder. Sent sections replace the stored ones."""

    event_overview: dict[str, Any] | None = None
    speaker_program: dict[str, Any] | None = None
    event_schedule: dict[str, Any] | None = None
    technical_requirements: dict[str, Any] | None = None
    travel_accommodation: dict[str, Any] | None = None
    additional_info: dict[str, Any] | None = None
    financial_details: dict[str, Any] | None = None
    confirmation: dict[str, Any] | None = None


class ProposalSummary(BaseModel):
    """Proposal fields shown to the speaker alongside the offer."""

    title: str | None = None
    client_name: str | None = None
    client_company: str | None = None
    event_title: str | None = None
    event_date: date | None = None
    event_location: str | None = None
    speaker_name: str = "Speaker"


class SpeakerReviewResponse(BaseModel):
    """What the speaker sees at /speaker-review/{token}.

    view_mode is "form" while the offer awaits a response and "summary" once
    the speaker has confirmed or declined.
    """

    id: int
    status: str
    confirmation_state: SpeakerConfirmationState
    can_respond: bool
    view_mode: str
    event_overview: dict[str, Any] = Field(default_factory=dict)
    speaker_program: dict[str, Any] = Field(default_factory=dict)
    event_schedule: dict[str, Any] = Field(default_factory=dict)
    technical_requirements: dict[str, Any] = Field(default_factory=dict)
    travel_accommodation: dict[str, Any] = Field(default_factory=dict)
    additional_info: dict[str, Any] = Field(default_factory=dict)
    financial_details: dict[str, Any] = Field(default_factory=dict)
    confirmation: dict[str, Any] = Field(default_factory=dict)
    speaker_confirmed: bool | None = None
    speaker_notes: str | None = None
    speaker_viewed_at: datetime | None = None
    speaker_response_at: datetime | None = None
    missing_fields: list[str] = Field(default_factory=list)
    proposal: ProposalSummary | None = None
