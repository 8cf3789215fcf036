import asyncio
import hashlib
import json
from typing import Any, List, Mapping, Optional, Sequence

from cloud_kitchen.domain.schemas import KitchenStatus, Menu, PublicOrder
from cloud_kitchen.infrastructure.repositories.kitchen_status_store import KitchenStatusStore
from cloud_kitchen.infrastructure.repositories.menu_store import MenuStore
from cloud_kitchen.interfaces.IOrderRepository import IOrderRepository


def document_version(payload: Any) -> str:
    """SHA-256 of the canonical JSON form; changes whenever the content does."""
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class KitchenService:
    """
    The narrow contract the HTTP layer (and any other caller) uses.

    Whether the kitchen is open is the caller's decision: create_order does
    not look at the kitchen status.
    """

    def __init__(self, order_repo: IOrderRepository, kitchen_status: KitchenStatusStore, menu: MenuStore):
        self.order_repo = order_repo
        self.kitchen_status = kitchen_status
        self.menu = menu

    # --- Orders ---

    async def create_order(
        self,
        customer: Optional[Mapping[str, Any]],
        items: Sequence[Mapping[str, Any]],
        totals: Optional[Mapping[str, Any]] = None,
        fulfillment: Optional[Mapping[str, Any]] = None,
    ) -> PublicOrder:
        return await self.order_repo.create(customer, items, totals, fulfillment)

    async def get_orders(self) -> List[PublicOrder]:
        return await self.order_repo.list()

    async def get_order(self, order_id: str) -> PublicOrder:
        return await self.order_repo.get(order_id)

    async def get_orders_by_phone(self, phone: str) -> List[PublicOrder]:
        return await self.order_repo.get_by_phone(phone)

    async def get_order_for_tracking(self, order_id: str, phone: str) -> PublicOrder:
        return await self.order_repo.get_for_tracking(order_id, phone)

    async def update_order_status(self, order_id: str, status: str) -> PublicOrder:
        return await self.order_repo.update_status(order_id, status)

    async def cancel_order(
        self,
        order_id: str,
        reason: Optional[str] = None,
        phone: Optional[str] = None,
        actor: str = "customer",
    ) -> PublicOrder:
        return await self.order_repo.cancel(order_id, reason=reason, phone=phone, actor=actor)

    async def orders_version(self) -> str:
        orders = await self.get_orders()
        return document_version([order.to_document() for order in orders])

    # --- Kitchen status ---

    async def get_kitchen_status(self) -> KitchenStatus:
        return await self.kitchen_status.get()

    async def set_kitchen_status(self, is_open: bool, message: Optional[str] = None) -> KitchenStatus:
        return await self.kitchen_status.set(is_open, message)

    # --- Menu ---

    async def read_menu(self) -> Menu:
        return await self.menu.read()

    async def write_menu(self, menu) -> Menu:
        return await self.menu.write(menu)

    async def menu_version(self) -> str:
        menu = await self.read_menu()
        return document_version(menu.to_document())

    async def drain(self) -> None:
        """Let background mirror writes finish (shutdown, tests)."""
        stores = [
            getattr(self.order_repo, "store", None),
            self.kitchen_status.store,
            self.menu.store,
        ]
        await asyncio.gather(*(store.drain() for store in stores if store is not None))
