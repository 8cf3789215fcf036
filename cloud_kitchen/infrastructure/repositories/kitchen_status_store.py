import logging
from typing import Mapping, Optional

from cloud_kitchen.domain.schemas import KitchenStatus
from cloud_kitchen.infrastructure.fallback_store import FallbackStore

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "We will be back shortly."


class KitchenStatusStore:
    """The kitchen's single open/closed flag plus the message shown while closed."""

    def __init__(self, store: FallbackStore, default_message: str = DEFAULT_MESSAGE):
        self.store = store
        self.default_message = default_message

    def default(self) -> KitchenStatus:
        return KitchenStatus(is_open=True, message=self.default_message)

    def normalize(self, document: Optional[Mapping]) -> KitchenStatus:
        document = document or {}
        is_open = document.get("isOpen")
        message = document.get("message")
        return KitchenStatus(
            is_open=is_open if isinstance(is_open, bool) else True,
            message=message.strip() if isinstance(message, str) and message.strip() else self.default_message,
        )

    async def get(self) -> KitchenStatus:
        document = await self.store.read(lambda driver: driver.load(), fallback_when_empty=True)
        return self.normalize(document) if document else self.default()

    async def set(self, is_open, message: Optional[str] = None) -> KitchenStatus:
        status = self.normalize({"isOpen": bool(is_open), "message": message})
        document = status.to_document()
        await self.store.write(lambda driver: driver.save(document))
        logger.info(f"✅ Kitchen is now {'open' if status.is_open else 'closed'}")
        return status
