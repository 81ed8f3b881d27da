import pytest
import pytest_asyncio
import os

# Set environment variables before app imports
os.environ["SECRET_KEY"] = "test-secret-key-123"
os.environ["ALGORITHM"] = "HS256"
os.environ["RESOURCE_TYPES"] = "orders,bom,products,users"

from httpx import AsyncClient, ASGITransport
from common.schemas import Principal
from common.security import create_token, get_token_payload, ALL_PERMISSION
from resource_service.main import app
from resource_service.services.dispatch_service import build_dispatcher
from resource_service.store import ResourceStore
from resource_service.services.resource_service import ResourceHandlerSet

RESOURCE_TYPES = ["orders", "bom", "products", "users"]


@pytest.fixture
def dispatcher():
    """A fresh route table and empty stores for every test."""
    return build_dispatcher(RESOURCE_TYPES)


@pytest.fixture
def orders_store():
    return ResourceStore("orders")


@pytest.fixture
def orders(orders_store):
    return ResourceHandlerSet(orders_store)


@pytest.fixture
def admin():
    return Principal(sub="admin_id", role="admin", perms=[ALL_PERMISSION])


@pytest_asyncio.fixture(scope="function")
async def client(dispatcher):
    """
    Async HTTP client for the FastAPI app (integration tests).
    ASGITransport does not run the lifespan, so the dispatcher is installed here.
    """
    app.state.dispatcher = dispatcher
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def as_payload():
    """Makes every request run with the given token payload."""
    def _set(payload: dict):
        app.dependency_overrides[get_token_payload] = lambda: payload
    return _set


@pytest.fixture
def auth_headers():
    """Real signed bearer token carrying the given permissions."""
    def _headers(*perms: str, sub: str = "user_id") -> dict:
        token = create_token({"sub": sub, "perms": list(perms)})
        return {"Authorization": f"Bearer {token}"}
    return _headers
