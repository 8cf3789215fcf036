"""
Remote (SQL) drivers.

SQLAlchemy sessions are blocking, so every public coroutine hands the session
work to a thread with `asyncio.to_thread`.
"""

import asyncio
import copy
from typing import Dict, List, Optional

from sqlalchemy import desc

from cloud_kitchen.domain.models import MenuRecord, OrderRecord
from cloud_kitchen.domain.schemas import Order, OrderStatus
from cloud_kitchen.interfaces.IDocumentDriver import IDocumentDriver
from cloud_kitchen.interfaces.IOrderDriver import IOrderDriver

MENU_ROW_ID = "active-menu"


def summarize_items(items) -> str:
    if not items:
        return "N/A"
    return ", ".join(f"{item.quantity}× {item.name or 'Menu Item'}" for item in items)


def build_order_row(document: Dict) -> Dict:
    """Projection columns for an order document. `order_data` stays authoritative."""
    order = Order.model_validate(document)
    is_cancelled = order.status == OrderStatus.CANCELLED
    return {
        "id": order.id,
        "public_id": order.public_id,
        "customer_name": order.customer.name or "Guest",
        "customer_phone": order.customer.phone or "",
        "customer_building": order.customer.building or "",
        "customer_apartment": order.customer.apartment or "",
        "items_summary": summarize_items(order.items),
        "items_count": sum(item.quantity for item in order.items),
        "subtotal": order.subtotal,
        "delivery_fee": order.delivery_fee,
        "total": order.total,
        "status": order.status.value,
        "fulfillment_method": order.fulfillment.method,
        "scheduled_for": order.scheduled_for,
        "placed_at": order.placed_at,
        "accepted_at": order.accepted_at,
        "delivered_at": None if is_cancelled else order.delivered_at,
        "cancelled_at": order.cancelled_at,
        "tracking_phone_key": order.tracking_phone_key,
        "order_data": copy.deepcopy(document),
    }


class SqlOrderDriver(IOrderDriver):
    name = "database"

    def __init__(self, session_factory):
        self.SessionLocal = session_factory

    async def list_orders(self, tracking_phone_key: Optional[str] = None) -> List[Dict]:
        return await asyncio.to_thread(self._list_orders, tracking_phone_key)

    async def find_order(self, order_id: str, tracking_phone_key: Optional[str] = None) -> Optional[Dict]:
        return await asyncio.to_thread(self._find_order, order_id, tracking_phone_key)

    async def save_order(self, document: Dict) -> None:
        await asyncio.to_thread(self._save_order, document)

    def _list_orders(self, tracking_phone_key):
        session = self.SessionLocal()
        try:
            query = session.query(OrderRecord.order_data).order_by(desc(OrderRecord.placed_at))
            if tracking_phone_key is not None:
                query = query.filter(OrderRecord.tracking_phone_key == tracking_phone_key)
            return [copy.deepcopy(row.order_data) for row in query.all() if row.order_data]
        finally:
            session.close()

    def _find_order(self, order_id, tracking_phone_key):
        if not order_id:
            return None
        session = self.SessionLocal()
        try:
            for column in (OrderRecord.id, OrderRecord.public_id):
                query = session.query(OrderRecord.order_data).filter(column == order_id)
                if tracking_phone_key is not None:
                    query = query.filter(OrderRecord.tracking_phone_key == tracking_phone_key)
                row = query.first()
                if row and row.order_data:
                    return copy.deepcopy(row.order_data)
            return None
        finally:
            session.close()

    def _save_order(self, document):
        session = self.SessionLocal()
        try:
            session.merge(OrderRecord(**build_order_row(document)))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class SqlMenuDriver(IDocumentDriver):
    name = "database"

    def __init__(self, session_factory, row_id: str = MENU_ROW_ID):
        self.SessionLocal = session_factory
        self.row_id = row_id

    async def load(self) -> Optional[Dict]:
        return await asyncio.to_thread(self._load)

    async def save(self, document: Dict) -> None:
        await asyncio.to_thread(self._save, document)

    def _load(self):
        session = self.SessionLocal()
        try:
            record = session.get(MenuRecord, self.row_id)
            return copy.deepcopy(record.payload) if record and record.payload else None
        finally:
            session.close()

    def _save(self, document):
        session = self.SessionLocal()
        try:
            session.merge(MenuRecord(id=self.row_id, payload=copy.deepcopy(document)))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
