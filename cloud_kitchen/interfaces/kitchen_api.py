import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Cookie, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cloud_kitchen.application.kitchen_service import KitchenService
from cloud_kitchen.domain.errors import KitchenStoreError

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


def get_kitchen(request: Request) -> KitchenService:
    """The service built by the composition root (see main.py)."""
    return request.app.state.kitchen


def is_admin(adminAuth: Optional[str] = Cookie(None)) -> bool:
    # The cookie is issued by the login flow, which lives outside this service.
    return adminAuth == "1"


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def kitchen_error_handler(request: Request, exc: KitchenStoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return error(exc.message, exc.status_code)


# ---------------------------------------------------------
# ORDERS
# ---------------------------------------------------------

class CreateOrderRequest(BaseModel):
    customer: Optional[Any] = None
    items: Optional[Any] = None
    totals: Optional[Any] = None
    fulfillment: Optional[Any] = None


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class CancelRequest(BaseModel):
    phone: Optional[str] = None
    reason: Optional[str] = None


def _valid_customer(customer: Any) -> bool:
    if not isinstance(customer, dict):
        return False
    return all(isinstance(customer.get(f), str) for f in ("name", "phone", "building", "apartment"))


@router.post("/orders")
async def create_order(payload: CreateOrderRequest, kitchen: KitchenService = Depends(get_kitchen)):
    status = await kitchen.get_kitchen_status()
    if not status.is_open:
        return error(status.message or "Kitchen is temporarily closed.", 503)

    if not _valid_customer(payload.customer):
        return error("Please provide complete delivery details.", 400)
    if not isinstance(payload.items, list) or not payload.items:
        return error("Your cart is empty.", 400)

    order = await kitchen.create_order(payload.customer, payload.items, payload.totals, payload.fulfillment)
    return JSONResponse({"order": order.to_document()}, status_code=201)


@router.get("/orders")
async def list_orders(kitchen: KitchenService = Depends(get_kitchen), admin: bool = Depends(is_admin)):
    if not admin:
        return error("Unauthorized", 401)
    orders = await kitchen.get_orders()
    return {"orders": [order.to_document() for order in orders]}


@router.get("/orders/last-updated")
async def orders_last_updated(kitchen: KitchenService = Depends(get_kitchen)):
    try:
        return {"version": await kitchen.orders_version()}
    except KitchenStoreError as e:
        logger.error(f"❌ Unable to compute orders version: {e}")
        return JSONResponse({"version": None}, status_code=500)


@router.get("/orders/by-phone")
async def orders_by_phone(phone: Optional[str] = None, kitchen: KitchenService = Depends(get_kitchen)):
    if not phone:
        return error("Phone number is required.", 400)
    orders = await kitchen.get_orders_by_phone(phone)
    return {"orders": [order.to_document() for order in orders]}


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    phone: Optional[str] = None,
    kitchen: KitchenService = Depends(get_kitchen),
    admin: bool = Depends(is_admin),
):
    if phone:
        order = await kitchen.get_order_for_tracking(order_id, phone)
    elif admin:
        order = await kitchen.get_order(order_id)
    else:
        return error("Phone number required to track order.", 400)
    return {"order": order.to_document()}


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    payload: StatusUpdateRequest,
    kitchen: KitchenService = Depends(get_kitchen),
    admin: bool = Depends(is_admin),
):
    if not admin:
        return error("Unauthorized", 401)
    if not payload.status:
        return error("Status is required.", 400)
    order = await kitchen.update_order_status(order_id, payload.status)
    return {"order": order.to_document()}


@router.post("/orders/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    payload: Optional[CancelRequest] = None,
    kitchen: KitchenService = Depends(get_kitchen),
    admin: bool = Depends(is_admin),
):
    payload = payload or CancelRequest()
    if not admin and not payload.phone:
        return error("Phone number is required to cancel.", 400)
    order = await kitchen.cancel_order(
        order_id,
        reason=payload.reason,
        phone=None if admin else payload.phone,
        actor="admin" if admin else "customer",
    )
    return {"order": order.to_document()}


# ---------------------------------------------------------
# KITCHEN STATUS
# ---------------------------------------------------------

class KitchenStatusRequest(BaseModel):
    isOpen: Optional[Any] = None
    message: Optional[str] = None


@router.get("/kitchen/status")
async def get_kitchen_status(kitchen: KitchenService = Depends(get_kitchen)):
    status = await kitchen.get_kitchen_status()
    return status.to_document()


@router.patch("/kitchen/status")
async def set_kitchen_status(
    payload: KitchenStatusRequest,
    kitchen: KitchenService = Depends(get_kitchen),
    admin: bool = Depends(is_admin),
):
    if not admin:
        return error("Unauthorized", 401)
    if not isinstance(payload.isOpen, bool):
        return error("Missing isOpen flag.", 400)
    status = await kitchen.set_kitchen_status(payload.isOpen, payload.message)
    return status.to_document()


# ---------------------------------------------------------
# MENU
# ---------------------------------------------------------

class MenuRequest(BaseModel):
    menu: Optional[Dict[str, Any]] = None


@router.get("/menu")
async def read_menu(kitchen: KitchenService = Depends(get_kitchen)):
    menu = await kitchen.read_menu()
    return {"menu": menu.to_document()}


@router.put("/menu")
async def write_menu(
    payload: MenuRequest,
    kitchen: KitchenService = Depends(get_kitchen),
    admin: bool = Depends(is_admin),
):
    if not admin:
        return error("Unauthorized", 401)
    if not payload.menu:
        return error("Menu payload is required.", 400)
    menu = await kitchen.write_menu(payload.menu)
    return {"menu": menu.to_document()}


@router.get("/menu/last-updated")
async def menu_last_updated(kitchen: KitchenService = Depends(get_kitchen)):
    try:
        return {"version": await kitchen.menu_version()}
    except KitchenStoreError as e:
        logger.error(f"❌ Unable to compute menu version: {e}")
        return JSONResponse({"version": None}, status_code=500)
