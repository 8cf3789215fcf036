from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Sequence

from cloud_kitchen.domain.schemas import PublicOrder

class IOrderRepository(ABC):
    @abstractmethod
    async def create(
        self,
        customer: Optional[Mapping[str, Any]],
        items: Sequence[Mapping[str, Any]],
        totals: Optional[Mapping[str, Any]] = None,
        fulfillment: Optional[Mapping[str, Any]] = None,
    ) -> PublicOrder:
        pass

    @abstractmethod
    async def list(self) -> List[PublicOrder]:
        pass

    @abstractmethod
    async def get(self, order_id: str) -> PublicOrder:
        pass

    @abstractmethod
    async def get_by_phone(self, phone: str) -> List[PublicOrder]:
        pass

    @abstractmethod
    async def get_for_tracking(self, order_id: str, phone: str) -> PublicOrder:
        pass

    @abstractmethod
    async def update_status(self, order_id: str, next_status: str) -> PublicOrder:
        pass

    @abstractmethod
    async def cancel(
        self,
        order_id: str,
        reason: Optional[str] = None,
        phone: Optional[str] = None,
        actor: str = "customer",
    ) -> PublicOrder:
        pass
