from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone

from httpx import ASGITransport, AsyncClient
import pytest
import pytest_asyncio
from sqlalchemy.orm import Session

from fieldboard.config import Settings
from fieldboard.db import Base
from fieldboard.main import create_app
from fieldboard.models import AuthSession, AuthUser


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", log_format="console", log_level="WARNING")


@pytest.fixture
def app(settings):
    """App over a private in-memory SQLite database."""
    app = create_app(settings)
    Base.metadata.create_all(app.state.engine)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def db(app) -> Session:
    session = app.state.session_factory()
    yield session
    session.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db) -> Callable[..., dict[str, str]]:
    """Insert an auth-provider user with a live session; return auth headers."""

    def _make_user(
        user_id: str = "user-alice",
        email: str = "alice@example.com",
        expires_in: timedelta = timedelta(hours=1),
    ) -> dict[str, str]:
        token = f"token-{user_id}"
        db.add(AuthUser(id=user_id, name=user_id, email=email))
        db.flush()
        db.add(
            AuthSession(
                id=f"session-{user_id}",
                token=token,
                user_id=user_id,
                expires_at=datetime.now(timezone.utc) + expires_in,
            )
        )
        db.commit()
        return {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def alice(make_user) -> dict[str, str]:
    return make_user()


@pytest.fixture
def bob(make_user) -> dict[str, str]:
    return make_user(user_id="user-bob", email="bob@example.com")
