import logging
import time
from typing import Callable, List, Optional

from pydantic import ValidationError

from storefront.client.models import CartItem, PersistedCart
from storefront.client.storage import KeyValueStorage
from storefront.core.config import settings

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current time in milliseconds since epoch."""
    return int(time.time() * 1000)


class LocalCartStore:
    """
    Durable client-side copy of the cart.

    The blob {items, timestamp, version} is overwritten on every save.
    A blob that fails to parse, carries another version, or is older than
    the TTL is discarded on load and the cart starts empty.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = settings.CART_STORAGE_KEY,
        version: str = settings.CART_STORAGE_VERSION,
        ttl_days: int = settings.CART_TTL_DAYS,
        clock: Optional[Callable[[], int]] = None
    ):
        self.storage = storage
        self.key = key
        self.version = version
        self.ttl_ms = ttl_days * DAY_MS
        self.clock = clock or now_ms

    def load(self) -> List[CartItem]:
        """Return the persisted items, or [] when there is nothing usable."""
        try:
            raw = self.storage.get_item(self.key)
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Discarding unreadable persisted cart: {e}")
            self.clear()
            return []

        if raw is None:
            return []

        try:
            blob = PersistedCart.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable persisted cart: {e.error_count()} error(s)")
            self.clear()
            return []

        if blob.version != self.version:
            logger.info(f"Discarding persisted cart with version {blob.version!r}")
            self.clear()
            return []

        age = self.clock() - blob.timestamp
        if age >= self.ttl_ms:
            logger.info(f"Discarding persisted cart older than {self.ttl_ms // DAY_MS} days")
            self.clear()
            return []

        return blob.items

    def save(self, items: List[CartItem]) -> None:
        """Overwrite the persisted blob with the given items."""
        blob = PersistedCart(items=items, timestamp=self.clock(), version=self.version)
        self.storage.set_item(self.key, blob.model_dump_json(by_alias=True))

    def clear(self) -> None:
        self.storage.remove_item(self.key)
