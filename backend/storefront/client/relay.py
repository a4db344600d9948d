import logging
from typing import Optional

from pydantic import ValidationError

from storefront.client.models import PendingCartItem, ProductSnapshot
from storefront.client.storage import KeyValueStorage
from storefront.core.config import settings

logger = logging.getLogger(__name__)


class PendingItemRelay:
    """
    Carries an anonymous add-to-cart across the login redirect.

    The attempt is parked in session storage before redirecting to the login
    page and replayed once a token is available. A failed replay discards the
    record; it is never retried.
    """

    def __init__(
        self,
        cart,
        storage: KeyValueStorage,
        navigator,
        key: str = settings.PENDING_ITEM_STORAGE_KEY
    ):
        self.cart = cart
        self.storage = storage
        self.navigator = navigator
        self.key = key

    def park(
        self,
        product_id: str,
        product: Optional[ProductSnapshot],
        redirect_url: Optional[str]
    ) -> None:
        record = PendingCartItem(
            product_id=product_id,
            product=product,
            redirect_url=redirect_url
        )
        self.storage.set_item(self.key, record.model_dump_json(by_alias=True))
        logger.info(f"Parked pending cart item {product_id}")

    def pending(self) -> Optional[PendingCartItem]:
        """The parked record, or None. An unreadable record is dropped."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return None

        try:
            return PendingCartItem.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable pending cart item")
            self.discard()
            return None

    def discard(self) -> None:
        self.storage.remove_item(self.key)

    async def replay(self) -> bool:
        """
        Add the parked item now that the user is logged in.

        Returns:
            True if the item was added
        """
        if not self.cart.is_authenticated:
            return False

        record = self.pending()
        if record is None:
            return False

        logger.info(f"Processing pending cart item {record.product_id}")
        success = await self.cart.add_item(record.product_id, record.product)
        self.discard()

        if not success:
            logger.warning(f"Pending cart item {record.product_id} could not be added, discarded")
            return False

        if record.redirect_url and record.redirect_url != self.navigator.current_url:
            self.navigator.push(record.redirect_url)

        return True
