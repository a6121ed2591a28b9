import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import uuid
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth.schemas import CurrentUser
from app.auth.security import create_access_token
from app.core.enums import StaffRole
from app.core.models import Ambassador, ReferralLead, Settlement
from app.db.session import Base, build_engine, get_db
from app.main import app


CURRENT_YEAR = "2025-2026"


@pytest.fixture()
async def engine(tmp_path):
    """File-backed SQLite per test so several sessions can see the same data."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, one DB session per request."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# --- Actors ---
@pytest.fixture()
def super_admin() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=StaffRole.SUPER_ADMIN, full_name="Super Admin")


@pytest.fixture()
def finance_admin() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=StaffRole.FINANCE_ADMIN, full_name="Finance Admin")


@pytest.fixture()
def campus_admin() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=StaffRole.CAMPUS_ADMIN, full_name="Campus Admin")


@pytest.fixture()
def ambassador_actor() -> CurrentUser:
    return CurrentUser(id=uuid.uuid4(), role=StaffRole.AMBASSADOR, full_name="Ambassador")


@pytest.fixture()
def auth_headers():
    """Bearer headers for a fresh actor with the given raw role label."""

    def _headers(role: str) -> dict:
        token = create_access_token(subject={"sub": str(uuid.uuid4()), "role": role})
        return {"Authorization": f"Bearer {token}"}

    return _headers


# --- Factories ---
@pytest.fixture()
def make_ambassador(db_session: AsyncSession):
    async def _make(
        role: str = "Parent",
        base_student_fee: Optional[Decimal] = Decimal("60000"),
        child_enrolled_at_school: bool = False,
        is_elite_last_year: bool = False,
        confirmed_referral_count: int = 0,
        **extra,
    ) -> Ambassador:
        ambassador = Ambassador(
            full_name=f"{role} Ambassador",
            role=role,
            base_student_fee=base_student_fee,
            child_enrolled_at_school=child_enrolled_at_school,
            is_elite_last_year=is_elite_last_year,
            confirmed_referral_count=confirmed_referral_count,
            **extra,
        )
        db_session.add(ambassador)
        await db_session.commit()
        return ambassador

    return _make


@pytest.fixture()
def make_lead(db_session: AsyncSession):
    async def _make(
        ambassador: Ambassador,
        status: str = "Confirmed",
        admitted_academic_year: Optional[str] = CURRENT_YEAR,
        annual_fee: Optional[Decimal] = None,
        **extra,
    ) -> ReferralLead:
        lead = ReferralLead(
            ambassador_id=ambassador.id,
            status=status,
            admitted_academic_year=admitted_academic_year,
            annual_fee=annual_fee,
            **extra,
        )
        db_session.add(lead)
        await db_session.commit()
        return lead

    return _make


@pytest.fixture()
def make_settlement(db_session: AsyncSession):
    async def _make(ambassador: Ambassador, amount: Decimal, status: str = "Pending", **extra) -> Settlement:
        settlement = Settlement(ambassador_id=ambassador.id, amount=amount, status=status, **extra)
        db_session.add(settlement)
        await db_session.commit()
        return settlement

    return _make
