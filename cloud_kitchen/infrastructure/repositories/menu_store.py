import logging
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml

from cloud_kitchen.domain.normalizers import normalize_menu
from cloud_kitchen.domain.schemas import Menu
from cloud_kitchen.infrastructure.fallback_store import FallbackStore

logger = logging.getLogger(__name__)


def load_menu_file(path) -> dict:
    """Read a menu document from YAML or JSON (YAML is a superset of JSON)."""
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


class MenuStore:
    def __init__(self, store: FallbackStore, seed_path: Optional[Union[str, Path]] = None):
        self.store = store
        self.seed_path = Path(seed_path) if seed_path else None

    def load_seed(self) -> Menu:
        if self.seed_path is not None:
            try:
                return normalize_menu(load_menu_file(self.seed_path))
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"⚠️ Unable to seed menu from {self.seed_path}, using an empty menu: {e}")
        return normalize_menu()

    async def read(self) -> Menu:
        return await self.store.read(self._read_or_seed)

    async def write(self, menu: Union[Menu, Mapping, None]) -> Menu:
        normalized = normalize_menu(menu)
        document = normalized.to_document()
        await self.store.write(lambda driver: driver.save(document))
        logger.info(f"✅ Menu saved ({sum(len(v) for v in normalized.items.values())} items)")
        return normalized

    async def _read_or_seed(self, driver) -> Menu:
        document = await driver.load()
        if document:
            return normalize_menu(document)
        if await driver.exists():
            # Present but unreadable: serve defaults and leave the stored copy alone.
            logger.warning(f"⚠️ Stored menu in {getattr(driver, 'name', 'backend')} is unreadable, serving defaults")
            return normalize_menu()

        # First read against this backend: persist the seed so later reads agree.
        seeded = self.load_seed()
        await driver.save(seeded.to_document())
        logger.info(f"✅ Seeded menu in {getattr(driver, 'name', 'backend')}")
        return seeded
