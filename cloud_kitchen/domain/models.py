from sqlalchemy import Column, Integer, String, DateTime, JSON, Numeric, Text
from sqlalchemy.sql import func
from cloud_kitchen.infrastructure.database import Base

class OrderRecord(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    public_id = Column(String(32), index=True, nullable=False)

    # Summary columns for the dashboard/reporting. They are a projection of
    # `order_data` and are rebuilt from it on every write.
    customer_name = Column(String, default="Guest")
    customer_phone = Column(String, default="")
    customer_building = Column(String, default="")
    customer_apartment = Column(String, default="")
    items_summary = Column(Text)
    items_count = Column(Integer, default=0)
    subtotal = Column(Numeric(10, 2), default=0)
    delivery_fee = Column(Numeric(10, 2), default=0)
    total = Column(Numeric(10, 2), default=0)
    status = Column(String(32), index=True)
    fulfillment_method = Column(String(16), default="delivery")
    scheduled_for = Column(String, nullable=True)
    placed_at = Column(DateTime(timezone=True), index=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    tracking_phone_key = Column(String(32), index=True)

    # The full order document: source of truth.
    order_data = Column(JSON, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class MenuRecord(Base):
    __tablename__ = "menus"

    id = Column(String(32), primary_key=True)  # "active-menu"
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
