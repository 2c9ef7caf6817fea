"""Tests for deal updates and the won -> project side effect."""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from speaker_bureau.domain.enums import DealEventType, DealStatus
from speaker_bureau.domain.models import DealEvent, FirmOffer, Project
from speaker_bureau.domain.schemas import DealCreate, DealUpdate
from speaker_bureau.services import deal_service
from speaker_bureau.services.deal_service import (
    DealNotFoundError,
    ProjectRetryNotAllowedError,
    crosses_into_won,
)
from speaker_bureau.services.project_synthesis import synthesize_project


async def _project_count(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Project))
    return result.scalar_one()


async def _event_types(db_session, deal_id) -> list[str]:
    return [e.event_type for e in await deal_service.list_deal_events(db_session, deal_id)]


# ---------------------------------------------------------------------------
# Transition detection
# ---------------------------------------------------------------------------


class TestCrossesIntoWon:

    @pytest.mark.parametrize(
        "original,updated,expected",
        [
            ("negotiation", "won", True),
            ("lead", "won", True),
            ("lost", "won", True),
            ("won", "won", False),
            ("lead", "qualified", False),
            ("won", "lost", False),
        ],
    )
    def test_only_non_won_to_won(self, original, updated, expected):
        assert crosses_into_won(original, updated) is expected


# ---------------------------------------------------------------------------
# update_deal
# ---------------------------------------------------------------------------


class TestUpdateDeal:

    async def test_won_transition_creates_exactly_one_project(self, db_session, make_deal):
        deal = await make_deal(status="negotiation", event_title="Acme AI Summit", deal_value=15000)

        await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.WON))

        projects = (await db_session.execute(select(Project))).scalars().all()
        assert len(projects) == 1
        assert projects[0].project_name == "Acme AI Summit"
        assert projects[0].budget == 15000
        assert f"#{deal.id}" in projects[0].notes

    async def test_keynote_in_austin_project_fields(self, db_session, make_deal):
        deal = await make_deal(
            status="negotiation", event_type="Keynote",
            event_location="Austin, TX", deal_value=15000,
        )

        await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.WON))

        project = (await db_session.execute(select(Project))).scalar_one()
        assert project.project_type == "Speaking"
        assert project.event_classification == "local"
        assert project.budget == 15000
        assert project.contract_signed is False
        assert project.status == "2plus_months"

    async def test_non_won_transition_creates_no_project(self, db_session, make_deal):
        deal = await make_deal(status="lead")

        await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.QUALIFIED))

        assert await _project_count(db_session) == 0

    async def test_won_to_won_creates_no_second_project(self, db_session, make_deal):
        deal = await make_deal(status="negotiation")
        await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.WON))
        await deal_service.update_deal(
            db_session, deal.id, DealUpdate(status=DealStatus.WON, notes="Signed")
        )

        assert await _project_count(db_session) == 1

    async def test_won_sets_won_date_and_events(self, db_session, make_deal):
        deal = await make_deal(status="proposal")

        updated = await deal_service.update_deal(
            db_session, deal.id, DealUpdate(status=DealStatus.WON)
        )

        assert updated.won_date is not None
        types = await _event_types(db_session, deal.id)
        assert types == [
            DealEventType.STATUS_CHANGED.value,
            DealEventType.PROJECT_CREATED.value,
        ]

    async def test_only_provided_fields_change(self, db_session, make_deal):
        deal = await make_deal(client_name="Dana Reyes", company="Acme Corp")

        updated = await deal_service.update_deal(
            db_session, deal.id, DealUpdate(company="Acme Holdings", client_name=None)
        )

        assert updated.company == "Acme Holdings"
        assert updated.client_name == "Dana Reyes"

    async def test_missing_deal_raises(self, db_session):
        with pytest.raises(DealNotFoundError):
            await deal_service.update_deal(db_session, 9999, DealUpdate(status=DealStatus.WON))


# ---------------------------------------------------------------------------
# Failure isolation and retry
# ---------------------------------------------------------------------------


class TestProjectFailureIsolation:

    async def test_synthesis_failure_keeps_deal_update(self, db_session, make_deal):
        deal = await make_deal(status="negotiation")

        with patch(
            "speaker_bureau.services.deal_service.synthesize_project",
            side_effect=RuntimeError("boom"),
        ):
            updated = await deal_service.update_deal(
                db_session, deal.id, DealUpdate(status=DealStatus.WON)
            )

        assert updated.status == "won"
        assert await _project_count(db_session) == 0

        events = await deal_service.list_deal_events(db_session, deal.id)
        failure = events[-1]
        assert failure.event_type == DealEventType.PROJECT_CREATION_FAILED.value
        assert "RuntimeError: boom" in failure.details["error"]

    async def test_project_insert_failure_keeps_deal_won(self, db_session, make_deal):
        deal = await make_deal(status="negotiation")
        deal_id = deal.id
        broken = synthesize_project(deal).model_copy(update={"project_name": None})

        with patch(
            "speaker_bureau.services.deal_service.synthesize_project",
            return_value=broken,
        ):
            updated = await deal_service.update_deal(
                db_session, deal_id, DealUpdate(status=DealStatus.WON)
            )

        assert updated.status == "won"
        assert updated.won_date is not None
        assert (await deal_service.get_deal(db_session, deal_id)).status == "won"
        assert await _project_count(db_session) == 0
        assert await _event_types(db_session, deal_id) == [
            DealEventType.STATUS_CHANGED.value,
            DealEventType.PROJECT_CREATION_FAILED.value,
        ]

    async def test_retry_after_failure_creates_project(self, db_session, make_deal):
        deal = await make_deal(status="negotiation")
        with patch(
            "speaker_bureau.services.deal_service.synthesize_project",
            side_effect=RuntimeError("boom"),
        ):
            await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.WON))

        project = await deal_service.retry_project_creation(db_session, deal.id)

        assert project is not None
        assert await _project_count(db_session) == 1
        assert (await _event_types(db_session, deal.id))[-1] == DealEventType.PROJECT_CREATED.value

    async def test_retry_refused_when_project_exists(self, db_session, make_deal):
        deal = await make_deal(status="negotiation")
        await deal_service.update_deal(db_session, deal.id, DealUpdate(status=DealStatus.WON))

        with pytest.raises(ProjectRetryNotAllowedError, match="already has a project"):
            await deal_service.retry_project_creation(db_session, deal.id)

    async def test_retry_refused_when_not_won(self, db_session, make_deal):
        deal = await make_deal(status="lead")

        with pytest.raises(ProjectRetryNotAllowedError, match="not won"):
            await deal_service.retry_project_creation(db_session, deal.id)

    async def test_retry_refused_without_recorded_failure(self, db_session, make_deal):
        deal = await make_deal(status="won")

        with pytest.raises(ProjectRetryNotAllowedError, match="no failed project creation"):
            await deal_service.retry_project_creation(db_session, deal.id)


# ---------------------------------------------------------------------------
# create / list / delete
# ---------------------------------------------------------------------------


class TestCreateListDelete:

    async def test_create_writes_created_event(self, db_session):
        deal = await deal_service.create_deal(
            db_session, DealCreate(client_name="Sam Ortiz", event_title="Sales Kickoff")
        )

        assert deal.status == "lead"
        assert await _event_types(db_session, deal.id) == [DealEventType.CREATED.value]

    async def test_list_filters_by_status_and_search(self, db_session, make_deal):
        await make_deal(client_name="Dana Reyes", status="lead")
        await make_deal(client_name="Sam Ortiz", company="Globex", status="won")

        assert [d.client_name for d in await deal_service.list_deals(db_session, status="won")] == ["Sam Ortiz"]
        assert [d.client_name for d in await deal_service.list_deals(db_session, search="globex")] == ["Sam Ortiz"]

    async def test_delete_keeps_linked_firm_offer(self, db_session, make_deal, make_firm_offer):
        offer = await make_firm_offer()
        deal = await make_deal(firm_offer_id=offer.id)

        assert await deal_service.delete_deal(db_session, deal.id) is True

        assert await deal_service.get_deal(db_session, deal.id) is None
        remaining = await db_session.execute(select(FirmOffer).where(FirmOffer.id == offer.id))
        assert remaining.scalar_one_or_none() is not None
        events = await db_session.execute(select(DealEvent).where(DealEvent.deal_id == deal.id))
        assert events.scalars().all() == []

    async def test_delete_missing_returns_false(self, db_session):
        assert await deal_service.delete_deal(db_session, 12345) is False
