import logging
import math
import uuid
from typing import Any, Callable, List, Mapping, Optional, Sequence

from pydantic import ValidationError as SchemaError

from cloud_kitchen.domain.errors import EmptyCartError, MissingPhoneError, NotFoundError
from cloud_kitchen.domain.normalizers import normalize_fulfillment, normalize_phone
from cloud_kitchen.domain.schemas import (
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PublicOrder,
    StatusEntry,
)
from cloud_kitchen.domain.status import apply_cancellation, apply_transition, parse_status, utc_now
from cloud_kitchen.infrastructure.fallback_store import FallbackStore
from cloud_kitchen.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)

PUBLIC_ID_ATTEMPTS = 5


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _number(value: Any, default: float = 0) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if math.isfinite(parsed) else default


def normalize_customer(customer: Optional[Mapping[str, Any]]) -> Customer:
    customer = customer if isinstance(customer, Mapping) else {}
    return Customer(
        name=_text(customer.get("name")) or "Guest",
        phone=_text(customer.get("phone")) or "N/A",
        building=_text(customer.get("building")) or "N/A",
        apartment=_text(customer.get("apartment")) or "-",
    )


def normalize_item(raw: Mapping[str, Any]) -> OrderItem:
    quantity = int(_number(raw.get("quantity"), 1))
    price = _number(raw.get("price"))
    return OrderItem(
        id=_text(raw.get("id")) or str(uuid.uuid4()),
        name=_text(raw.get("name")) or "Menu Item",
        quantity=quantity if quantity >= 1 else 1,
        price=price if price > 0 else 0,
    )


class OrderRepository(IOrderRepository):
    """
    Order persistence on top of a FallbackStore of IOrderDriver backends.

    Every order leaving this class is a PublicOrder: the tracking phone key
    is never exposed.
    """

    def __init__(self, store: FallbackStore, clock: Callable = utc_now, tz=None):
        self.store = store
        self._clock = clock
        self._tz = tz

    @staticmethod
    def sanitize(order: Order) -> PublicOrder:
        return order.sanitized()

    # ---------------------------------------------------------
    # CREATE
    # ---------------------------------------------------------

    async def create(
        self,
        customer: Optional[Mapping[str, Any]],
        items: Sequence[Mapping[str, Any]],
        totals: Optional[Mapping[str, Any]] = None,
        fulfillment: Optional[Mapping[str, Any]] = None,
    ) -> PublicOrder:
        if not isinstance(items, (list, tuple)):
            raise EmptyCartError()
        order_items = [normalize_item(item) for item in items if isinstance(item, Mapping)]
        if not order_items:
            raise EmptyCartError()

        subtotal = sum(item.price * item.quantity for item in order_items)
        totals = totals if isinstance(totals, Mapping) else {}
        delivery_fee = max(_number(totals.get("deliveryFee")), 0)

        now = self._clock()
        normalized_customer = normalize_customer(customer)
        normalized_fulfillment = normalize_fulfillment(fulfillment, self._tz)

        order = Order(
            id=str(uuid.uuid4()),
            public_id=await self._new_public_id(now.year),
            customer=normalized_customer,
            tracking_phone_key=normalize_phone(normalized_customer.phone),
            items=order_items,
            subtotal=round(subtotal, 2),
            delivery_fee=round(delivery_fee, 2),
            total=round(subtotal + delivery_fee, 2),
            status=OrderStatus.PENDING,
            status_history=[StatusEntry(status=OrderStatus.PENDING, timestamp=now)],
            fulfillment=normalized_fulfillment,
            scheduled_for=normalized_fulfillment.schedule.iso,
            placed_at=now,
        )

        await self._save(order)
        logger.info(f"✅ Order {order.public_id} placed")
        return self.sanitize(order)

    async def _new_public_id(self, year: int) -> str:
        for _ in range(PUBLIC_ID_ATTEMPTS):
            candidate = f"ORD-{year}-{uuid.uuid4().hex[:6].upper()}"
            existing = await self.store.read(lambda driver: driver.find_order(candidate))
            if existing is None:
                return candidate
            logger.warning(f"⚠️ Public id {candidate} already taken, regenerating")
        return f"ORD-{year}-{uuid.uuid4().hex[:10].upper()}"

    # ---------------------------------------------------------
    # READ
    # ---------------------------------------------------------

    async def list(self) -> List[PublicOrder]:
        documents = await self.store.read(lambda driver: driver.list_orders())
        return [self.sanitize(order) for order in self._parse_all(documents)]

    async def get(self, order_id: str) -> PublicOrder:
        return self.sanitize(await self._load(order_id))

    async def get_by_phone(self, phone: str) -> List[PublicOrder]:
        phone_key = normalize_phone(phone)
        if not phone_key:
            raise MissingPhoneError()

        documents = await self.store.read(lambda driver: driver.list_orders(phone_key))
        orders = self._parse_all(documents)
        if not orders:
            raise NotFoundError("No orders found for that phone number.")
        orders.sort(key=lambda order: order.placed_at, reverse=True)
        return [self.sanitize(order) for order in orders]

    async def get_for_tracking(self, order_id: str, phone: str) -> PublicOrder:
        phone_key = normalize_phone(phone)
        if not order_id or not phone_key:
            raise MissingPhoneError("Order ID and phone are required.")
        return self.sanitize(await self._load(order_id, phone_key))

    # ---------------------------------------------------------
    # LIFECYCLE
    # ---------------------------------------------------------

    async def update_status(self, order_id: str, next_status, actor: Optional[str] = None) -> PublicOrder:
        target = parse_status(next_status)
        order = await self._load(order_id)
        updated = apply_transition(order, target, actor=actor, now=self._clock())
        await self._save(updated)
        logger.info(f"✅ Order {updated.public_id}: {order.status.value} -> {target.value}")
        return self.sanitize(updated)

    async def cancel(
        self,
        order_id: str,
        reason: Optional[str] = None,
        phone: Optional[str] = None,
        actor: str = "customer",
    ) -> PublicOrder:
        order = await self._load(order_id)
        cancelled = apply_cancellation(order, reason=reason, actor=actor, phone=phone, now=self._clock())
        await self._save(cancelled)
        logger.info(f"✅ Order {cancelled.public_id} cancelled by {actor}")
        return self.sanitize(cancelled)

    # ---------------------------------------------------------
    # HELPERS
    # ---------------------------------------------------------

    async def _load(self, order_id: str, phone_key: Optional[str] = None) -> Order:
        document = await self.store.read(lambda driver: driver.find_order(order_id, phone_key))
        order = self._parse(document) if document else None
        if order is None:
            raise NotFoundError()
        return order

    async def _save(self, order: Order) -> None:
        document = order.to_document()
        await self.store.write(lambda driver: driver.save_order(document))

    @staticmethod
    def _parse(document) -> Optional[Order]:
        try:
            return Order.model_validate(document)
        except SchemaError as e:
            logger.error(f"❌ Skipping unreadable order document: {e}")
            return None

    def _parse_all(self, documents) -> List[Order]:
        return [order for order in (self._parse(d) for d in documents or []) if order is not None]
