"""
Local JSON file drivers: the fallback store.

One file per concern under DATA_DIR (`orders.json`, `kitchen-status.json`,
`menu.json`), created on first access. Writes go to a temp file that is then
renamed over the target so a crash never leaves half a document behind.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from cloud_kitchen.interfaces.IDocumentDriver import IDocumentDriver
from cloud_kitchen.interfaces.IOrderDriver import IOrderDriver

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _write_json(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # One temp file per write; concurrent writers must not share it.
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    ) as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)
        tmp_path = fh.name
    try:
        os.replace(tmp_path, path)
    except OSError:
        os.unlink(tmp_path)
        raise


def _placed_at(document: Dict) -> datetime:
    raw = document.get("placedAt")
    if not raw:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _matches(document: Dict, order_id: str, field: str, tracking_phone_key: Optional[str]) -> bool:
    if document.get(field) != order_id:
        return False
    return tracking_phone_key is None or document.get("trackingPhoneKey") == tracking_phone_key


class JsonOrderFileDriver(IOrderDriver):
    name = "file store"

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()

    async def list_orders(self, tracking_phone_key: Optional[str] = None) -> List[Dict]:
        orders = await asyncio.to_thread(self._read_orders)
        if tracking_phone_key is not None:
            orders = [o for o in orders if o.get("trackingPhoneKey") == tracking_phone_key]
        return sorted(orders, key=_placed_at, reverse=True)

    async def find_order(self, order_id: str, tracking_phone_key: Optional[str] = None) -> Optional[Dict]:
        if not order_id:
            return None
        orders = await asyncio.to_thread(self._read_orders)
        for field in ("id", "publicId"):
            for document in orders:
                if _matches(document, order_id, field, tracking_phone_key):
                    return document
        return None

    async def save_order(self, document: Dict) -> None:
        await asyncio.to_thread(self._save_order, document)

    def _ensure_store(self) -> None:
        if self.path.exists():
            return
        with self._lock:
            if not self.path.exists():
                _write_json(self.path, {"orders": []})

    def _read_orders(self) -> List[Dict]:
        self._ensure_store()
        try:
            with open(self.path, encoding="utf-8") as fh:
                parsed = json.loads(fh.read() or "{}")
            if isinstance(parsed, dict) and isinstance(parsed.get("orders"), list):
                return parsed["orders"]
        except (OSError, ValueError) as e:
            logger.error(f"❌ Unable to read orders store, resetting: {e}")
        _write_json(self.path, {"orders": []})
        return []

    def _save_order(self, document: Dict) -> None:
        with self._lock:
            orders = self._read_orders()
            for index, existing in enumerate(orders):
                if existing.get("id") == document.get("id"):
                    orders[index] = document
                    break
            else:
                orders.insert(0, document)
            _write_json(self.path, {"orders": orders})


class JsonDocumentFileDriver(IDocumentDriver):
    """
    A single JSON document on disk.

    `seed` (optional) builds the document written when the file does not
    exist yet; without it a missing file loads as None.
    """

    name = "file store"

    def __init__(self, path, seed: Optional[Callable[[], Dict]] = None):
        self.path = Path(path)
        self.seed = seed

    async def load(self) -> Optional[Dict]:
        return await asyncio.to_thread(self._load)

    async def save(self, document: Dict) -> None:
        await asyncio.to_thread(_write_json, self.path, document)

    def _load(self) -> Optional[Dict]:
        if not self.path.exists():
            if self.seed is None:
                return None
            document = self.seed()
            _write_json(self.path, document)
            return document
        try:
            with open(self.path, encoding="utf-8") as fh:
                parsed = json.loads(fh.read() or "null")
        except (OSError, ValueError) as e:
            logger.error(f"❌ Unable to read {self.path.name}: {e}")
            return None
        return parsed if isinstance(parsed, dict) else None

    async def exists(self) -> bool:
        return await asyncio.to_thread(self.path.exists)
