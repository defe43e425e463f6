import os

# Must be set before mietlink.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("LOG_JSON", "false")

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mietlink.database import get_session
from mietlink.dependencies import auth as auth_dependency
from mietlink.dependencies.auth import get_current_user
from mietlink.main import app
from mietlink.models import Base
from mietlink.services import gemini, properties, users

TENANT = {"user_id": "tenant-1", "email": "tenant1@example.com", "role": "tenant"}
OTHER_TENANT = {"user_id": "tenant-2", "email": "tenant2@example.com", "role": "tenant"}
LANDLORD = {"user_id": "owner-1", "email": "owner1@example.com", "role": "landlord"}


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    # One shared in-memory database for the test's own session and the app's sessions
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class AuthSwitch:
    """Stands in for the user-management service; tests pick who is calling."""

    def __init__(self, identity=TENANT):
        self.identity = identity

    def login(self, identity):
        self.identity = identity

    async def __call__(self):
        return dict(self.identity)


@pytest.fixture
def auth():
    return AuthSwitch()


@pytest.fixture
async def client(session_factory, auth):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = auth
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def landlord(db):
    return await users.ensure_user(db, LANDLORD["user_id"], email=LANDLORD["email"], role="landlord")


@pytest.fixture
async def tenant(db):
    return await users.ensure_user(db, TENANT["user_id"], email=TENANT["email"], role="tenant")


@pytest.fixture
async def listing(db, landlord):
    return await properties.create_property(
        db,
        landlord.id,
        address="Seefeldstrasse 12, 8008 Zürich",
        rent_chf=Decimal("1850.00"),
        earliest_exit=date(2025, 6, 30),
        key_count=3,
    )


@pytest.fixture
def mock_gemini(monkeypatch):
    """Replace every Gemini call with canned answers; tests override single entries as needed."""
    calls = {}

    async def classify_document(data, mime_type, filename, type_hint):
        calls.setdefault("classify_document", []).append(type_hint)
        return {"valid": True, "confidence": 0.9, "doc_type": type_hint, "reason": "Looks genuine"}

    async def parse_contract(text):
        calls.setdefault("parse_contract", []).append(text)
        return {
            "rent_chf": 1850,
            "notice_months": 3,
            "key_count": 3,
            "obligations": ["Professional final cleaning", "Return all keys"],
        }

    async def generate_tasks(obligations):
        calls.setdefault("generate_tasks", []).append(list(obligations))
        return [{"title": o, "days_before_exit": 7} for o in obligations]

    async def generate_cover_letter(user_info, property_info, language="de"):
        calls.setdefault("generate_cover_letter", []).append(language)
        return "Sehr geehrte Damen und Herren, gerne bewerbe ich mich für Ihre Wohnung."

    async def explain_score(candidate_data):
        calls.setdefault("explain_score", []).append(candidate_data)
        return "All three required documents are valid."

    async def generate_regie_email(candidates, language="de"):
        calls.setdefault("generate_regie_email", []).append(candidates)
        return {"subject": "Top Kandidaten", "body": f"{len(candidates)} Kandidaten"}

    for fn in (classify_document, parse_contract, generate_tasks, generate_cover_letter, explain_score, generate_regie_email):
        monkeypatch.setattr(f"mietlink.services.gemini.{fn.__name__}", fn)
    return calls


@pytest.fixture(autouse=True)
def closed_breakers():
    """Breakers are module-level; no test may inherit another's tripped circuit."""
    for breaker in (gemini.breaker, auth_dependency.breaker):
        breaker.close()
    yield
    for breaker in (gemini.breaker, auth_dependency.breaker):
        breaker.close()
