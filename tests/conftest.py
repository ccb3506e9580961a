"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database per test (schema created from the models)
- Session token minting for authenticated tests
- HTTPX AsyncClient with the CSRF header set
"""
import os
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite://")

from appendlist_api.main import app
from appendlist_api.core.deps import (
    COOKIE_NAME,
    get_access_config,
    get_db,
    get_session_factory,
)
from appendlist_api.core.security import create_session_token
from appendlist_api.db.base import Base
from appendlist_api.db.enums import ListType
from appendlist_api.db.session import create_db_engine
from appendlist_api.schemas.auth import Principal
from appendlist_api.services import append_list_service
from appendlist_api.services.access_service import AccessConfig


ADMIN_EMAIL = "admin@example.com"
AUDITOR_EMAIL = "auditor@example.com"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh in-memory database for each test.

    StaticPool keeps the single connection alive across the threadpool
    FastAPI runs sync endpoints in.
    """
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
def access_config() -> AccessConfig:
    return AccessConfig(
        admin_emails=frozenset({ADMIN_EMAIL}),
        owner_export_whitelist=frozenset({AUDITOR_EMAIL}),
    )


# =============================================================================
# Principal Fixtures
# =============================================================================

@pytest.fixture
def owner() -> Principal:
    return Principal(id="user-owner", email="Owner@Example.com", name="Olivia Owner")


@pytest.fixture
def member() -> Principal:
    return Principal(id="user-member", email="member@example.com", name="Mia Member 21BCE1234")


@pytest.fixture
def outsider() -> Principal:
    return Principal(id="user-outsider", email="outsider@example.com", name="Oscar Outsider")


@pytest.fixture
def admin() -> Principal:
    return Principal(id="user-admin", email=ADMIN_EMAIL, name="Ada Admin")


@pytest.fixture
def auditor() -> Principal:
    return Principal(id="user-auditor", email=AUDITOR_EMAIL, name="Audrey Auditor")


# =============================================================================
# List Fixtures
# =============================================================================

@pytest.fixture
def plain_list(db: Session, owner: Principal):
    return append_list_service.create_list(
        db, owner.id, "Night Slip", "Sign up for late entry", ListType.PLAIN
    )


@pytest.fixture
def github_list(db: Session, owner: Principal):
    return append_list_service.create_list(
        db, owner.id, "Hackathon Team", "Share your GitHub handle", ListType.GITHUB
    )


@pytest.fixture
def others_list(db: Session, owner: Principal):
    return append_list_service.create_list(
        db, owner.id, "Project Ideas", "Add your ideas", ListType.OTHERS
    )


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    principal: Principal
    token: str
    cookie_name: str = COOKIE_NAME


def make_auth(principal: Principal) -> TestAuth:
    token = create_session_token(
        user_id=principal.id,
        email=principal.email,
        name=principal.name,
    )
    return TestAuth(principal=principal, token=token)


def _set_session(client: AsyncClient, principal: Principal | None) -> None:
    client.cookies.clear()
    if principal is not None:
        auth = make_auth(principal)
        client.cookies.set(auth.cookie_name, auth.token)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(
    db: Session,
    access_config: AccessConfig,
) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient bound to the test database, CSRF header included.

    Starts unauthenticated; use the ``login`` fixture to attach a session.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_access_config] = lambda: access_config
    # Background tasks would collide with the shared in-memory connection
    app.dependency_overrides[get_session_factory] = lambda: (lambda: db)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def login(client: AsyncClient):
    """Switch the client's session cookie; ``login(None)`` signs out."""

    def _login(principal: Principal | None) -> None:
        _set_session(client, principal)

    return _login
