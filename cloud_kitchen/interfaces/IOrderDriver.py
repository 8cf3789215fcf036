from abc import ABC, abstractmethod
from typing import List, Dict, Optional

class IOrderDriver(ABC):
    """One backend holding order documents (camelCase dicts, tracking key included)."""

    name: str = "backend"

    @abstractmethod
    async def list_orders(self, tracking_phone_key: Optional[str] = None) -> List[Dict]:
        """Newest first by placement time."""

    @abstractmethod
    async def find_order(self, order_id: str, tracking_phone_key: Optional[str] = None) -> Optional[Dict]:
        """Match on id, then on publicId."""

    @abstractmethod
    async def save_order(self, document: Dict) -> None:
        """Insert or replace by id."""
