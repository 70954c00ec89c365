import httpx
import pytest

from harmony.core.database import get_db
from harmony.core.deps import get_dashboard_service
from harmony.main import app
from harmony.services.dashboard import DashboardService


@pytest.fixture
async def client(session_factory):
    """API client bound to the per-test database."""

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_dashboard_service] = lambda: DashboardService(session_factory)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
