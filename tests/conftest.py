"""
Pytest configuration and fixtures for the kitchen core tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cloud_kitchen.application.kitchen_service import KitchenService
from cloud_kitchen.core.config import BUNDLED_MENU_SEED, Settings
from cloud_kitchen.infrastructure.database import create_session_factory, init_schema
from cloud_kitchen.infrastructure.drivers.file_driver import JsonDocumentFileDriver, JsonOrderFileDriver
from cloud_kitchen.infrastructure.fallback_store import FallbackStore
from cloud_kitchen.infrastructure.repositories.kitchen_status_store import KitchenStatusStore
from cloud_kitchen.infrastructure.repositories.menu_store import MenuStore
from cloud_kitchen.infrastructure.repositories.order_repository import OrderRepository
from cloud_kitchen.interfaces.IDocumentDriver import IDocumentDriver
from cloud_kitchen.interfaces.IOrderDriver import IOrderDriver


class FakeClock:
    """Deterministic clock; every call moves time forward one second."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class DownOrderDriver(IOrderDriver):
    """A remote datastore that is unreachable."""

    name = "database"

    def __init__(self):
        self.calls = 0

    async def list_orders(self, tracking_phone_key=None):
        self.calls += 1
        raise ConnectionError("database unreachable")

    async def find_order(self, order_id, tracking_phone_key=None):
        self.calls += 1
        raise ConnectionError("database unreachable")

    async def save_order(self, document):
        self.calls += 1
        raise ConnectionError("database unreachable")


class DownDocumentDriver(IDocumentDriver):
    name = "redis"

    async def load(self):
        raise ConnectionError("redis unreachable")

    async def save(self, document):
        raise ConnectionError("redis unreachable")


class MemoryDocumentDriver(IDocumentDriver):
    name = "memory"

    def __init__(self, document=None):
        self.document = document
        self.saves = 0

    async def load(self):
        return self.document

    async def save(self, document):
        self.saves += 1
        self.document = document


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def order_file_driver(data_dir):
    return JsonOrderFileDriver(data_dir / "orders.json")


@pytest.fixture
def order_repo(order_file_driver, clock):
    """Repository with the remote store disabled (file store only)."""
    return OrderRepository(FallbackStore(primary=None, fallback=order_file_driver, label="orders"), clock=clock)


@pytest.fixture
def session_factory():
    """SQLite in-memory remote store."""
    engine, SessionLocal = create_session_factory("sqlite:///:memory:")
    init_schema(engine)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def kitchen_status_store(data_dir):
    return KitchenStatusStore(
        FallbackStore(primary=None, fallback=JsonDocumentFileDriver(data_dir / "kitchen-status.json"))
    )


@pytest.fixture
def menu_store(data_dir):
    return MenuStore(
        FallbackStore(primary=None, fallback=JsonDocumentFileDriver(data_dir / "menu.json"), label="menu"),
        seed_path=BUNDLED_MENU_SEED,
    )


@pytest.fixture
def kitchen(order_repo, kitchen_status_store, menu_store):
    return KitchenService(order_repo=order_repo, kitchen_status=kitchen_status_store, menu=menu_store)


@pytest.fixture
def settings(data_dir):
    return Settings(DATA_DIR=str(data_dir), DATABASE_URL=None, REDIS_URL=None, _env_file=None)


@pytest.fixture
def client(settings, kitchen):
    from cloud_kitchen.main import create_app

    app = create_app(settings=settings, kitchen=kitchen)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    client.cookies.set("adminAuth", "1")
    return client


def samosa_items():
    return [{"id": "a", "name": "Samosa", "quantity": 2, "price": 3.00}]


def customer(phone="(555) 123-4567"):
    return {"name": "Asha", "phone": phone, "building": "Tower B", "apartment": "1204"}
