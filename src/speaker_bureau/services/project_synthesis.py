"""Deal -> Project field mapping used when a deal is won.

Pure functions only: no session, no I/O. Every field read from the deal has a
fallback, so synthesis never fails on a sparsely filled deal.
"""

from datetime import date

from speaker_bureau.domain.enums import (
    EventClassification,
    Priority,
    ProjectStatus,
    ProjectType,
)
from speaker_bureau.domain.schemas import ProjectCreate

TO_BE_DETERMINED = "To be determined"

# Exact-match event_type -> project_type; anything else is Other
PROJECT_TYPE_BY_EVENT_TYPE: dict[str, ProjectType] = {
    "Workshop": ProjectType.WORKSHOP,
    "Keynote": ProjectType.SPEAKING,
    "Consulting": ProjectType.CONSULTING,
}

VIRTUAL_MARKERS = ("virtual", "webinar", "remote")


def classify_project_type(event_type: str | None) -> ProjectType:
    return PROJECT_TYPE_BY_EVENT_TYPE.get(event_type or "", ProjectType.OTHER)


def classify_event(event_type: str | None, event_location: str | None) -> EventClassification:
    """Return VIRTUAL if either field mentions a virtual marker, else LOCAL."""
    haystack = f"{event_type or ''} {event_location or ''}".lower()
    if any(marker in haystack for marker in VIRTUAL_MARKERS):
        return EventClassification.VIRTUAL
    return EventClassification.LOCAL


def _priority(value) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        return Priority.MEDIUM


def synthesize_project(deal, today: date | None = None) -> ProjectCreate:
    """Build the creation payload for the project that a won deal turns into.

    Billing and logistics contacts both come from the deal's single client
    contact. Status always starts at 2plus_months regardless of how close the
    event is; the proximity recomputation moves it later.
    """
    today = today or date.today()

    client_name = deal.client_name or ""
    client_email = deal.client_email or ""
    client_phone = deal.client_phone or ""
    event_title = deal.event_title or ""
    event_type = deal.event_type or ""
    event_location = deal.event_location or ""
    attendee_count = deal.attendee_count or 0

    description = f"Speaking engagement for {deal.company or client_name or 'client'}"
    if event_title:
        description = f"{description}: {event_title}"

    notes = f"Created from won deal #{deal.id}."
    if deal.notes:
        notes = f"{notes}\n\n{deal.notes}"

    return ProjectCreate(
        project_name=event_title,
        client_name=client_name,
        client_email=client_email,
        client_phone=client_phone,
        company=deal.company or "",
        project_type=classify_project_type(event_type),
        description=description,
        status=ProjectStatus.TWO_PLUS_MONTHS,
        priority=_priority(deal.priority),
        start_date=today,
        end_date=deal.event_date,
        deadline=deal.event_date,
        budget=deal.deal_value or 0.0,
        billing_contact_name=client_name,
        billing_contact_email=client_email,
        billing_contact_phone=client_phone,
        logistics_contact_name=client_name,
        logistics_contact_email=client_email,
        logistics_contact_phone=client_phone,
        event_name=event_title,
        event_date=deal.event_date,
        event_location=event_location or TO_BE_DETERMINED,
        event_type=event_type,
        event_classification=classify_event(event_type, event_location),
        attendee_count=attendee_count,
        audience_size=attendee_count,
        requested_speaker_name=deal.speaker_requested or TO_BE_DETERMINED,
        program_topic=TO_BE_DETERMINED,
        contract_signed=False,
        invoice_sent=False,
        payment_received=False,
        presentation_ready=False,
        materials_sent=False,
        notes=notes,
    )
