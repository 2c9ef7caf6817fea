"""SQLAlchemy ORM models for the speaker bureau back office.

All models use SQLite-compatible types:
- Integer autoincrement primary keys (ids appear in admin URLs)
- JSON for nested document sections (no JSONB)
- DateTime for timestamps, stored as naive UTC

No ORM relationships are declared; cross-table links are plain id columns
so nothing lazy-loads inside async request handlers.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func

from speaker_bureau.infra.database import Base


def utcnow() -> datetime:
    """Naive UTC now, matching what SQLite hands back on reload."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AdminUser(Base):
    """Back-office account allowed to use the admin API."""

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="admin")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())
    last_login_at = Column(DateTime, nullable=True)


# ---------------------------------------------------------------------------
# Sales pipeline
# ---------------------------------------------------------------------------


class Deal(Base):
    """A prospective speaking-engagement booking moving through the pipeline."""

    __tablename__ = "deals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), default="")
    client_phone = Column(String(50), default="")
    company = Column(String(255), default="")
    event_title = Column(String(500), nullable=False)
    event_date = Column(Date, nullable=True)
    event_location = Column(String(500), default="")
    event_type = Column(String(100), default="")
    speaker_requested = Column(String(255), nullable=True)
    attendee_count = Column(Integer, default=0)
    budget_range = Column(String(100), default="")
    deal_value = Column(Float, default=0.0)
    status = Column(String(20), nullable=False, default="lead", index=True)
    priority = Column(String(20), nullable=False, default="medium")
    source = Column(String(100), default="")
    notes = Column(Text, default="")
    last_contact = Column(Date, nullable=True)
    next_follow_up = Column(Date, nullable=True)
    won_date = Column(DateTime, nullable=True)
    # Link only; deleting the deal leaves the firm offer in place.
    firm_offer_id = Column(Integer, ForeignKey("firm_offers.id"), nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class DealEvent(Base):
    """Immutable audit entry for a deal (status changes, project synthesis outcome)."""

    __tablename__ = "deal_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    deal_id = Column(Integer, ForeignKey("deals.id"), nullable=False, index=True)
    event_type = Column(String(50), nullable=False)
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, default=func.now())


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class Project(Base):
    """Delivery record for a booked engagement, owned by operations."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_name = Column(String(500), nullable=False)
    client_name = Column(String(255), nullable=False, default="")
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    project_type = Column(String(50), nullable=False, default="Other")
    description = Column(Text, nullable=True)
    status = Column(String(30), nullable=False, default="2plus_months", index=True)
    priority = Column(String(20), nullable=False, default="medium")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    deadline = Column(Date, nullable=True)
    budget = Column(Float, default=0.0)
    spent = Column(Float, default=0.0)
    completion_percentage = Column(Integer, default=0)

    # Event overview: billing / logistics contacts
    billing_contact_name = Column(String(255), nullable=True)
    billing_contact_email = Column(String(255), nullable=True)
    billing_contact_phone = Column(String(50), nullable=True)
    logistics_contact_name = Column(String(255), nullable=True)
    logistics_contact_email = Column(String(255), nullable=True)
    logistics_contact_phone = Column(String(50), nullable=True)

    # Event details
    event_name = Column(String(500), nullable=True)
    event_date = Column(Date, nullable=True)
    event_location = Column(String(500), nullable=True)
    event_type = Column(String(100), nullable=True)
    event_classification = Column(String(20), nullable=True)
    attendee_count = Column(Integer, default=0)
    audience_size = Column(Integer, nullable=True)
    requested_speaker_name = Column(String(255), nullable=True)
    program_topic = Column(String(500), nullable=True)

    # Status tracking
    contract_signed = Column(Boolean, default=False)
    invoice_sent = Column(Boolean, default=False)
    payment_received = Column(Boolean, default=False)
    presentation_ready = Column(Boolean, default=False)
    materials_sent = Column(Boolean, default=False)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime, nullable=True)


# ---------------------------------------------------------------------------
# Proposals and firm offers
# ---------------------------------------------------------------------------


class Proposal(Base):
    """Client-facing sales document, viewable by anyone holding access_token."""

    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    proposal_number = Column(String(50), unique=True, nullable=False)
    title = Column(String(500), nullable=True)
    deal_id = Column(Integer, nullable=True)  # informational, deals already reference firm_offers
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=True)
    client_company = Column(String(255), nullable=True)
    event_title = Column(String(500), nullable=True)
    event_date = Column(Date, nullable=True)
    event_location = Column(String(500), nullable=True)
    speakers = Column(JSON, default=list)  # [{"name": ..., "fee": ...}]
    total_investment = Column(Float, default=0.0)
    status = Column(String(20), nullable=False, default="draft", index=True)
    access_token = Column(String(64), unique=True, nullable=False, index=True)
    valid_until = Column(DateTime, nullable=True)
    created_by = Column(String(255), nullable=True)
    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    accepted_by = Column(String(255), nullable=True)
    acceptance_notes = Column(Text, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejected_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class FirmOffer(Base):
    """Speaker-facing confirmation packet for one proposal.

    speaker_access_token is a separate credential from Proposal.access_token.
    speaker_confirmed is a latch: NULL while pending, then True/False forever.
    """

    __tablename__ = "firm_offers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    proposal_id = Column(Integer, ForeignKey("proposals.id"), unique=True, nullable=True)
    status = Column(String(30), nullable=False, default="draft")
    speaker_access_token = Column(String(64), unique=True, nullable=False, index=True)

    # Nested document sections
    event_overview = Column(JSON, default=dict)
    speaker_program = Column(JSON, default=dict)
    event_schedule = Column(JSON, default=dict)
    technical_requirements = Column(JSON, default=dict)
    travel_accommodation = Column(JSON, default=dict)
    additional_info = Column(JSON, default=dict)
    financial_details = Column(JSON, default=dict)
    confirmation = Column(JSON, default=dict)

    # Speaker response
    speaker_confirmed = Column(Boolean, nullable=True)
    speaker_notes = Column(Text, nullable=True)
    speaker_viewed_at = Column(DateTime, nullable=True)
    speaker_response_at = Column(DateTime, nullable=True)

    submitted_at = Column(DateTime, nullable=True)
    sent_to_speaker_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
