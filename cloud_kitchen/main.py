import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.exc import OperationalError

from cloud_kitchen.core.config import Settings, get_settings
from cloud_kitchen.application.kitchen_service import KitchenService
from cloud_kitchen.domain.errors import KitchenStoreError
from cloud_kitchen.domain.schemas import KitchenStatus
from cloud_kitchen.infrastructure.database import create_session_factory, init_schema
from cloud_kitchen.infrastructure.drivers.file_driver import JsonDocumentFileDriver, JsonOrderFileDriver
from cloud_kitchen.infrastructure.drivers.redis_driver import RedisDocumentDriver, create_redis_client
from cloud_kitchen.infrastructure.drivers.sql_driver import SqlMenuDriver, SqlOrderDriver
from cloud_kitchen.infrastructure.fallback_store import FallbackStore
from cloud_kitchen.infrastructure.repositories.kitchen_status_store import KitchenStatusStore
from cloud_kitchen.infrastructure.repositories.menu_store import MenuStore
from cloud_kitchen.infrastructure.repositories.order_repository import OrderRepository
from cloud_kitchen.interfaces import kitchen_api

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# DATABASE CONNECTION (With Retry Logic)
# ---------------------------------------------------------
MAX_RETRIES = 10
WAIT_SECONDS = 3


async def wait_for_database(engine, retries: int = MAX_RETRIES, wait_seconds: float = WAIT_SECONDS) -> bool:
    for attempt in range(retries):
        try:
            logger.info(f"🔄 Attempting DB connection ({attempt + 1}/{retries})...")
            await asyncio.to_thread(init_schema, engine)
            logger.info("✅ DB Connected and Tables Created.")
            return True
        except OperationalError as e:
            logger.warning(f"⚠️ DB not ready yet ({e}). Waiting {wait_seconds}s...")
            await asyncio.sleep(wait_seconds)
    logger.error("❌ Could not connect to DB after retries. Serving from the file store until it is back.")
    return False


# ---------------------------------------------------------
# COMPOSITION ROOT
# ---------------------------------------------------------
def build_kitchen_service(settings: Settings, session_factory=None, redis_client=None) -> KitchenService:
    data_dir = Path(settings.DATA_DIR)

    if session_factory is None and settings.DATABASE_URL:
        _, session_factory = create_session_factory(settings.DATABASE_URL)
    if redis_client is None and settings.REDIS_URL:
        redis_client = create_redis_client(settings.REDIS_URL)

    order_store = FallbackStore(
        primary=SqlOrderDriver(session_factory) if session_factory else None,
        fallback=JsonOrderFileDriver(data_dir / "orders.json"),
        label="orders",
    )

    default_status = KitchenStatus(is_open=True, message=settings.DEFAULT_KITCHEN_MESSAGE)
    status_store = FallbackStore(
        primary=RedisDocumentDriver(redis_client) if redis_client else None,
        fallback=JsonDocumentFileDriver(data_dir / "kitchen-status.json", seed=default_status.to_document),
        label="kitchen status",
    )

    menu_store = FallbackStore(
        primary=SqlMenuDriver(session_factory) if session_factory else None,
        fallback=JsonDocumentFileDriver(data_dir / "menu.json"),
        label="menu",
    )

    return KitchenService(
        order_repo=OrderRepository(order_store, tz=settings.KITCHEN_TIMEZONE),
        kitchen_status=KitchenStatusStore(status_store, default_message=settings.DEFAULT_KITCHEN_MESSAGE),
        menu=MenuStore(menu_store, seed_path=settings.MENU_SEED_PATH),
    )


def create_app(settings: Optional[Settings] = None, kitchen: Optional[KitchenService] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = kitchen
        if service is None:
            session_factory = None
            if settings.DATABASE_URL:
                engine, session_factory = create_session_factory(settings.DATABASE_URL)
                await wait_for_database(engine)
            service = build_kitchen_service(settings, session_factory=session_factory)
        app.state.kitchen = service
        yield
        await service.drain()

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_exception_handler(KitchenStoreError, kitchen_api.kitchen_error_handler)
    app.include_router(kitchen_api.router)

    @app.get("/")
    def health_check():
        status = "active" if hasattr(app.state, "kitchen") else "degraded"
        return {"status": status, "system": "Cloud Kitchen Orders"}

    return app


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging(get_settings().LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
