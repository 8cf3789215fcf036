"""
Primary-with-fallback storage.

Every concern (orders, kitchen status, menu) talks to one FallbackStore that
wraps a remote driver and a local file driver:

    read:   primary -> (on error) file
    write:  primary -> (on error) file, then mirror to primary in the background

Errors from the primary are logged and never reach the caller. Domain errors
(KitchenStoreError) raised inside an operation are not backend failures and
propagate untouched. Only when the file store fails too does the caller see a
StorageError.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar

from cloud_kitchen.domain.errors import KitchenStoreError, StorageError

logger = logging.getLogger(__name__)

D = TypeVar("D")
T = TypeVar("T")

Operation = Callable[[D], Awaitable[T]]


class FallbackStore(Generic[D]):
    def __init__(self, primary: Optional[D], fallback: D, label: str = "data"):
        self.primary = primary
        self.fallback = fallback
        self.label = label
        self._mirrors: Set[asyncio.Task] = set()

    @property
    def primary_enabled(self) -> bool:
        return self.primary is not None

    async def read(self, operation: Operation, *, fallback_when_empty: bool = False):
        """
        Run `operation` against the primary, or the file store if the primary
        fails. With `fallback_when_empty`, a primary answer of None also falls
        through to the file store.
        """
        primary_answered = False
        if self.primary is not None:
            try:
                result = await operation(self.primary)
            except KitchenStoreError:
                raise
            except Exception as e:
                logger.error(
                    f"❌ Unable to read {self.label} from {self._name(self.primary)}, "
                    f"falling back to file store: {e}"
                )
            else:
                if result is not None or not fallback_when_empty:
                    return result
                primary_answered = True

        try:
            return await operation(self.fallback)
        except KitchenStoreError:
            raise
        except Exception as e:
            if primary_answered:
                logger.warning(f"⚠️ File store unreadable for {self.label}: {e}")
                return None
            logger.error(f"❌ Unable to read {self.label} from file store: {e}")
            raise StorageError(f"Unable to read {self.label}.") from e

    async def write(self, operation: Operation):
        if self.primary is not None:
            try:
                return await operation(self.primary)
            except KitchenStoreError:
                raise
            except Exception as e:
                logger.error(
                    f"❌ Unable to write {self.label} to {self._name(self.primary)}, "
                    f"falling back to file store: {e}"
                )

        try:
            result = await operation(self.fallback)
        except KitchenStoreError:
            raise
        except Exception as e:
            logger.error(f"❌ Unable to write {self.label} to file store: {e}")
            raise StorageError() from e

        if self.primary is not None:
            self._schedule_mirror(operation)
        return result

    async def drain(self) -> None:
        """Wait for background mirror writes still in flight."""
        while self._mirrors:
            await asyncio.gather(*list(self._mirrors), return_exceptions=True)

    @property
    def pending_mirrors(self) -> int:
        return len(self._mirrors)

    def _schedule_mirror(self, operation: Operation) -> None:
        task = asyncio.create_task(self._mirror(operation))
        self._mirrors.add(task)
        task.add_done_callback(self._mirrors.discard)

    async def _mirror(self, operation: Operation) -> None:
        try:
            await operation(self.primary)
        except Exception as e:
            # Eventual consistency is best-effort; the file copy already holds the write.
            logger.warning(f"⚠️ Unable to mirror {self.label} to {self._name(self.primary)}: {e}")
        else:
            logger.info(f"✅ Mirrored {self.label} to {self._name(self.primary)}")

    @staticmethod
    def _name(driver) -> str:
        return getattr(driver, "name", type(driver).__name__)
