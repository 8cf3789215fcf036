"""
Value types for the kitchen core.

Documents are persisted and returned with camelCase keys (`publicId`,
`statusHistory`, ...) so the JSON files, the remote `order_data` column and the
API all share one shape. Python code uses the snake_case attribute names.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    DONE = "Done"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# ---------------------------------------------------------
# ORDERS
# ---------------------------------------------------------

class Customer(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Guest"
    phone: str = "N/A"
    building: str = "N/A"
    apartment: str = "-"


class OrderItem(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class StatusEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    timestamp: datetime
    actor: Optional[str] = None


class Schedule(CamelModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["now", "later"] = "now"
    date: Optional[str] = None
    time: Optional[str] = None
    iso: Optional[str] = None
    asap: Optional[bool] = None


class Fulfillment(CamelModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["delivery", "pickup"] = "delivery"
    schedule: Schedule = Field(default_factory=lambda: Schedule(mode="now", asap=True))


class PublicOrder(CamelModel):
    """An order as it may be shown outside the repository."""

    model_config = ConfigDict(frozen=True)

    id: str
    public_id: str
    customer: Customer
    items: List[OrderItem]
    subtotal: float
    delivery_fee: float
    total: float
    status: OrderStatus = OrderStatus.PENDING
    status_history: List[StatusEntry]
    fulfillment: Fulfillment
    scheduled_for: Optional[str] = None
    placed_at: datetime
    accepted_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None


class Order(PublicOrder):
    """The stored order. Carries the phone key used to authorize customers."""

    tracking_phone_key: str = ""

    def sanitized(self) -> PublicOrder:
        return PublicOrder.model_validate(self.model_dump(exclude={"tracking_phone_key"}))


# ---------------------------------------------------------
# KITCHEN / MENU
# ---------------------------------------------------------

class KitchenStatus(CamelModel):
    is_open: bool = True
    message: str = "We will be back shortly."


class MenuCategory(CamelModel):
    key: str
    label: str


class MenuItem(CamelModel):
    # Unknown keys (admin-side extras) survive a read/write cycle.
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str = "Menu Item"
    description: str = ""
    price: float = 0
    image: Optional[str] = None
    veg: bool = False
    bestseller: bool = False
    chef_special: bool = False
    spicy: int = Field(0, ge=0, le=3)
    rating: float = 0
    reviews: int = 0
    available: bool = True


class Menu(CamelModel):
    categories: List[MenuCategory] = Field(default_factory=list)
    items: Dict[str, List[MenuItem]] = Field(default_factory=dict)
