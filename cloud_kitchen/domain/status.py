"""
Order status state machine.

    Pending          -> Preparing, Cancelled
    Preparing        -> Done, Cancelled
    Done             -> Out for Delivery, Cancelled
    Out for Delivery -> Delivered, Cancelled

Delivered and Cancelled are terminal. Transitions never mutate the order
they are given; they return a new Order value.
"""

from datetime import datetime, timezone
from typing import Optional

from cloud_kitchen.domain.errors import (
    InvalidTransitionError,
    TerminalStateError,
    UnauthorizedError,
    UnknownStatusError,
)
from cloud_kitchen.domain.normalizers import normalize_phone
from cloud_kitchen.domain.schemas import Order, OrderStatus, StatusEntry

STATUS_FLOW = {
    OrderStatus.PENDING: (OrderStatus.PREPARING, OrderStatus.CANCELLED),
    OrderStatus.PREPARING: (OrderStatus.DONE, OrderStatus.CANCELLED),
    OrderStatus.DONE: (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED),
    OrderStatus.OUT_FOR_DELIVERY: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ADMIN_ACTOR = "admin"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except (TypeError, ValueError):
        raise UnknownStatusError(value) from None


def allowed_transitions(status) -> tuple:
    return STATUS_FLOW.get(parse_status(status), ())


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def apply_transition(
    order: Order,
    next_status,
    actor: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    target = parse_status(next_status)
    if target not in STATUS_FLOW[order.status]:
        raise InvalidTransitionError(order.status.value, target.value)

    now = now or utc_now()
    updates = {
        "status": target,
        "status_history": [StatusEntry(status=target, timestamp=now, actor=actor), *order.status_history],
    }
    if order.accepted_at is None and target != OrderStatus.PENDING:
        updates["accepted_at"] = now
    if target == OrderStatus.DELIVERED:
        updates["delivered_at"] = now
    if target == OrderStatus.CANCELLED and order.cancelled_at is None:
        updates["cancelled_at"] = now
    return order.model_copy(update=updates)


def apply_cancellation(
    order: Order,
    reason: Optional[str] = None,
    actor: str = "customer",
    phone: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    if actor != ADMIN_ACTOR:
        phone_key = normalize_phone(phone)
        if not phone_key or phone_key != order.tracking_phone_key:
            raise UnauthorizedError()

    if order.status in TERMINAL_STATUSES:
        raise TerminalStateError()

    now = now or utc_now()
    return order.model_copy(update={
        "status": OrderStatus.CANCELLED,
        "cancel_reason": reason or None,
        "status_history": [
            StatusEntry(status=OrderStatus.CANCELLED, timestamp=now, actor=actor),
            *order.status_history,
        ],
        "cancelled_at": now,
        # A cancelled order was never delivered, whatever an earlier correction said.
        "delivered_at": None,
    })
