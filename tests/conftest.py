"""Shared test infrastructure for the Speaker Bureau test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- make_client: builds an HTTPX AsyncClient on a test app with chosen routers
- make_deal / make_proposal / make_firm_offer: row factories
"""

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from speaker_bureau.infra.database import Base, get_db

import speaker_bureau.domain.models  # noqa: F401

from speaker_bureau.app.errors import register_error_handlers
from speaker_bureau.app.routes.auth import get_current_admin
from speaker_bureau.domain.models import Deal, FirmOffer, Proposal
from speaker_bureau.services.capability_tokens import new_access_token


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Test client factory
# ---------------------------------------------------------------------------

@pytest.fixture
def admin_user():
    return SimpleNamespace(
        id=1, email="ops@speakabout.ai", name="Ops", role="admin", is_active=True,
    )


@pytest.fixture
def make_client(db_session, admin_user):
    """Factory that builds an AsyncClient wired to a test app.

    Usage:
        async with make_client(deals_router) as client: ...
        async with make_client(deals_router, as_admin=False) as client: ...

    as_admin=True bypasses the bearer-token check with admin_user.
    raise_app_exceptions=False lets tests observe the 500 handler.
    """
    def _factory(*routers, as_admin: bool = True, raise_app_exceptions: bool = True):
        test_app = FastAPI()
        register_error_handlers(test_app)
        for router in routers:
            test_app.include_router(router)

        async def _override_get_db():
            yield db_session

        test_app.dependency_overrides[get_db] = _override_get_db
        if as_admin:
            test_app.dependency_overrides[get_current_admin] = lambda: admin_user

        return AsyncClient(
            transport=ASGITransport(app=test_app, raise_app_exceptions=raise_app_exceptions),
            base_url="http://testserver",
        )

    return _factory


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_deal(db_session):
    """Factory that creates a Deal row.

    Usage:
        deal = await make_deal(status="negotiation", event_type="Keynote")
    """
    async def _factory(**kwargs) -> Deal:
        values = {
            "client_name": "Dana Reyes",
            "client_email": "dana@acme.test",
            "client_phone": "+15125550100",
            "company": "Acme Corp",
            "event_title": "Acme AI Summit",
            "event_location": "Austin, TX",
            "event_type": "Keynote",
            "deal_value": 15000.0,
            "status": "negotiation",
            "priority": "medium",
        }
        values.update(kwargs)
        deal = Deal(**values)
        db_session.add(deal)
        await db_session.commit()
        await db_session.refresh(deal)
        return deal

    return _factory


@pytest.fixture
def make_proposal(db_session):
    async def _factory(**kwargs) -> Proposal:
        values = {
            "proposal_number": f"PROP-TEST-{new_access_token()[:6]}",
            "title": "Keynote proposal for Acme",
            "client_name": "Dana Reyes",
            "client_company": "Acme Corp",
            "event_title": "Acme AI Summit",
            "event_location": "Austin, TX",
            "speakers": [{"name": "Avery Kim", "fee": 15000}],
            "total_investment": 15000.0,
            "status": "sent",
            "access_token": new_access_token(),
        }
        values.update(kwargs)
        proposal = Proposal(**values)
        db_session.add(proposal)
        await db_session.commit()
        await db_session.refresh(proposal)
        return proposal

    return _factory


@pytest.fixture
def make_firm_offer(db_session):
    async def _factory(**kwargs) -> FirmOffer:
        values = {
            "status": "sent_to_speaker",
            "speaker_access_token": new_access_token(),
            "event_overview": {"event_name": "Acme AI Summit"},
            "financial_details": {"speaker_fee": 15000},
        }
        values.update(kwargs)
        offer = FirmOffer(**values)
        db_session.add(offer)
        await db_session.commit()
        await db_session.refresh(offer)
        return offer

    return _factory
