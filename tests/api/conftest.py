"""
API test fixtures: an ASGI client over the app wired to the test container.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from atec.main import create_app


@pytest.fixture
async def client(container) -> AsyncClient:
    """Create test client over an app using the test container."""
    app = create_app(container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def locked_package(container, active_package, admin_principal):
    """An active package that has already scored results."""
    await container.packages.mark_locked(active_package.id)
    return await container.packages.find_by_id(active_package.id)
