import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="price-alerts-")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["FINNHUB_API_KEY"] = "test-key"

import pytest
from httpx import ASGITransport, AsyncClient

from price_alerts.core.database import Base, async_session_maker, engine
from price_alerts.core.rate_limit import alert_limiter, global_limiter
from price_alerts.main import app
from price_alerts.modules.auth.schemas import Identity
from price_alerts.modules.auth.service import AuthService, create_access_token
from price_alerts.modules.stats.service import drain_pending
from price_alerts.modules.stocks.feed import get_price_feed
from price_alerts.modules.users.schemas import UserRequestAdd
from tests.fakes import FakeMailer, FakePriceFeed


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await drain_pending()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(autouse=True)
def reset_limiters():
    global_limiter.reset()
    alert_limiter.reset()
    yield
    global_limiter.reset()
    alert_limiter.reset()


@pytest.fixture
async def session():
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def feed():
    fake = FakePriceFeed()
    app.dependency_overrides[get_price_feed] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_price_feed, None)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def make_user():
    """Register a user and return (identity, auth headers)."""

    async def _make(email: str) -> tuple[Identity, dict]:
        async with async_session_maker() as session:
            user = await AuthService(session).register_user(
                UserRequestAdd(email=email, password="password123")
            )
        identity = Identity(uid=user.id, email=user.email)
        token = create_access_token(user.id, user.email)
        return identity, {"Authorization": f"Bearer {token}"}

    return _make
