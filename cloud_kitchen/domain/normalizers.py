"""
Pure input normalizers: phone keys, fulfillment requests and menu documents.

None of these raise on bad input; they coerce to the closest valid shape.
"""

import logging
import math
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union

import pytz
from pydantic import BaseModel

from cloud_kitchen.domain.schemas import Fulfillment, Menu, MenuCategory, MenuItem, Schedule

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")

DEFAULT_CATEGORIES = (
    {"key": "starters", "label": "Starters"},
    {"key": "mains", "label": "Main Course"},
    {"key": "breads", "label": "Breads"},
    {"key": "desserts", "label": "Desserts"},
)


def normalize_phone(phone: Optional[str]) -> str:
    """'(555) 123-4567' -> '5551234567'. Empty string means "no key"."""
    return _NON_DIGITS.sub("", phone or "")


# ---------------------------------------------------------
# FULFILLMENT
# ---------------------------------------------------------

def _resolve_timezone(tz):
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def build_schedule_iso(date: str, time: str, tz=None) -> Optional[str]:
    """Kitchen wall-clock `date` + `time` as a UTC ISO timestamp, or None."""
    if not date or not time:
        return None
    try:
        naive = datetime.fromisoformat(f"{date}T{time}:00")
    except (TypeError, ValueError):
        return None
    if naive.tzinfo is None:
        local = _resolve_timezone(tz).localize(naive)
    else:
        local = naive
    return local.astimezone(pytz.utc).isoformat().replace("+00:00", "Z")


def normalize_fulfillment(raw: Optional[Mapping] = None, tz=None) -> Fulfillment:
    raw = raw if isinstance(raw, Mapping) else {}
    method = "pickup" if raw.get("method") == "pickup" else "delivery"
    schedule = raw.get("schedule")
    if not isinstance(schedule, Mapping):
        schedule = {}

    if schedule.get("mode") == "later" and schedule.get("date") and schedule.get("time"):
        date, time = schedule["date"], schedule["time"]
        iso = build_schedule_iso(date, time, tz)
        if iso is None:
            logger.warning(f"⚠️ Unparseable schedule {date!r} {time!r}; keeping order without a timestamp")
        return Fulfillment(
            method=method,
            schedule=Schedule(mode="later", date=str(date), time=str(time), iso=iso),
        )

    return Fulfillment(method=method, schedule=Schedule(mode="now", asap=True))


# ---------------------------------------------------------
# MENU
# ---------------------------------------------------------

_MENU_ITEM_KEYS = {
    "id", "name", "description", "price", "image", "veg", "bestseller",
    "chefSpecial", "chef_special", "spicy", "rating", "reviews", "available",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _to_float(value: Any) -> float:
    if _is_number(value):
        return float(value)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _text(value: Any, default: str) -> str:
    return default if value is None else str(value)


def fallback_label(key: str) -> str:
    """'main-course' -> 'Main Course'."""
    spaced = re.sub(r"[-_]+", " ", key)
    label = re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced).strip()
    return label or "Menu"


def _as_dict(value: Any) -> Optional[dict]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return dict(value)
    return None


def normalize_menu_item(raw: Mapping) -> MenuItem:
    chef_special = raw.get("chefSpecial", raw.get("chef_special"))
    spicy = raw.get("spicy")
    reviews = raw.get("reviews")
    item_id = raw.get("id")

    extras = {k: v for k, v in raw.items() if k not in _MENU_ITEM_KEYS}
    return MenuItem(
        id=None if item_id is None else str(item_id),
        name=_text(raw.get("name"), "Menu Item"),
        description=_text(raw.get("description"), ""),
        price=_to_float(raw.get("price")),
        image=None if raw.get("image") is None else str(raw.get("image")),
        veg=raw.get("veg") is True,
        bestseller=raw.get("bestseller") is True,
        chef_special=chef_special is True,
        spicy=int(max(0, min(3, spicy))) if _is_number(spicy) else 0,
        rating=_to_float(raw.get("rating")),
        reviews=int(reviews) if _is_number(reviews) else 0,
        available=raw.get("available") is not False,
        **extras,
    )


def normalize_categories(categories: Any) -> list:
    source = categories if isinstance(categories, list) and categories else list(DEFAULT_CATEGORIES)
    seen = set()
    normalized = []
    for entry in source:
        entry = _as_dict(entry)
        if entry is None:
            continue
        key = entry.get("key").strip() if isinstance(entry.get("key"), str) else ""
        if not key or key in seen:
            continue
        label = entry.get("label").strip() if isinstance(entry.get("label"), str) else ""
        normalized.append(MenuCategory(key=key, label=label or fallback_label(key)))
        seen.add(key)
    if not normalized:
        return [MenuCategory(**c) for c in DEFAULT_CATEGORIES]
    return normalized


def normalize_menu(menu: Union[Menu, Mapping, None] = None) -> Menu:
    """
    Rebuild a menu so that `items` has exactly one list per category.

    Items filed under an unknown category are dropped. Documents that keep a
    category's items at the top level (`{"mains": [...]}`) are still read.
    Idempotent: normalize_menu(normalize_menu(x)) == normalize_menu(x).
    """
    menu = _as_dict(menu) or {}
    categories = normalize_categories(menu.get("categories"))
    bucket = menu.get("items") if isinstance(menu.get("items"), Mapping) else {}

    items = {}
    for category in categories:
        source = bucket.get(category.key)
        if not isinstance(source, list):
            legacy = menu.get(category.key)
            source = legacy if isinstance(legacy, list) else []
        items[category.key] = [
            normalize_menu_item(raw) for raw in (_as_dict(i) for i in source) if raw is not None
        ]

    return Menu(categories=categories, items=items)
