from abc import ABC, abstractmethod
from typing import Dict, Optional

class IDocumentDriver(ABC):
    """One backend holding a single JSON document (kitchen status, menu)."""

    name: str = "backend"

    @abstractmethod
    async def load(self) -> Optional[Dict]:
        pass

    @abstractmethod
    async def save(self, document: Dict) -> None:
        pass

    async def exists(self) -> bool:
        """Whether the backend holds a document at all, readable or not."""
        return await self.load() is not None
