"""
Client-side cart store.

Keeps the current cart in memory, writes it through to durable storage on
every change and, for logged-in users, mirrors changes to the cart API.
Local changes are applied first and are visible immediately; the remote
call and a follow-up sync happen afterwards.

Merge policy on sync: a remote line replaces the local line with the same
product id (remote wins on quantity), local-only lines are kept after the
remote ones.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Union

from pydantic import ValidationError

from storefront.client.local_store import LocalCartStore
from storefront.client.models import CartItem, CartValidation, ProductSnapshot
from storefront.client.navigation import HistoryNavigator
from storefront.client.notifications import CartNotifier
from storefront.client.relay import PendingItemRelay
from storefront.client.remote import RemoteCartError, RemoteCartService
from storefront.client.storage import FileStorage, KeyValueStorage, MemoryStorage
from storefront.client.validation import validate_items
from storefront.core.config import settings
from storefront.utils.images import normalize_images

logger = logging.getLogger(__name__)

Listener = Callable[[List[CartItem]], None]
ProductInput = Union[ProductSnapshot, Dict[str, Any], None]


def item_from_remote(line: Dict[str, Any]) -> CartItem:
    """Build a cart line from one /api/cart item."""
    name = line.get("name") or "Product"
    stock = int(line.get("stockQuantity") or 0)

    return CartItem(
        product_id=line["productId"],
        quantity=line["quantity"],
        product=ProductSnapshot(
            id=line["productId"],
            name=name,
            description=line.get("description") or "",
            price=float(line.get("price") or 0),
            images=normalize_images(line.get("images"), name),
            category=line.get("category"),
            stock_count=stock,
            in_stock=stock > 0
        )
    )


def merge_items(local: List[CartItem], remote: List[CartItem]) -> List[CartItem]:
    """Remote lines first, then local lines the server does not know about."""
    remote_ids = {item.product_id for item in remote}
    return remote + [item for item in local if item.product_id not in remote_ids]


class CartStore:
    """Observable cart shared by every view that shows or edits the cart."""

    def __init__(
        self,
        local_store: LocalCartStore,
        remote: RemoteCartService,
        session_storage: KeyValueStorage,
        navigator: HistoryNavigator,
        notifier: Optional[CartNotifier] = None,
        resync_delay: float = settings.CART_RESYNC_DELAY_SECONDS,
        login_path: str = settings.LOGIN_PATH
    ):
        self.local_store = local_store
        self.remote = remote
        self.navigator = navigator
        self.notifier = notifier
        self.resync_delay = resync_delay
        self.login_path = login_path
        self.relay = PendingItemRelay(self, session_storage, navigator)
        self.loading = False
        self._items: List[CartItem] = []
        self._listeners: List[Listener] = []
        self._sync_tasks: Set[asyncio.Task] = set()

    @classmethod
    def create(
        cls,
        storage_dir: Union[str, Path] = settings.CART_STORAGE_DIR,
        base_url: str = settings.CART_API_BASE_URL,
        current_url: str = "/"
    ) -> "CartStore":
        """Wire a store with file-backed durable storage and an in-memory session."""
        durable = FileStorage(storage_dir)
        return cls(
            local_store=LocalCartStore(durable),
            remote=RemoteCartService(durable, base_url=base_url),
            session_storage=MemoryStorage(),
            navigator=HistoryNavigator(current_url),
            notifier=CartNotifier()
        )

    # State and subscriptions

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def is_authenticated(self) -> bool:
        return self.remote.is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the item list after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_items(self, items: List[CartItem]) -> None:
        self._items = items
        self.local_store.save(items)
        for listener in list(self._listeners):
            listener(list(items))

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    # Synchronization

    async def hydrate(self) -> None:
        """Adopt the persisted cart, then reconcile with the server."""
        self._items = self.local_store.load()
        for listener in list(self._listeners):
            listener(list(self._items))
        await self.sync()

    async def sync(self) -> None:
        """Merge the server cart into local state. Does nothing for anonymous users."""
        if not self.is_authenticated:
            logger.debug("No token found, using local cart only")
            return

        self.loading = True
        try:
            lines = await self.remote.fetch_cart()
        except RemoteCartError as e:
            logger.error(f"Failed to sync cart with server: {e}")
            return
        finally:
            self.loading = False

        remote_items = []
        for line in lines:
            try:
                remote_items.append(item_from_remote(line))
            except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
                logger.warning(f"Skipping malformed cart line from server: {e}")

        self._set_items(merge_items(self._items, remote_items))

    def schedule_sync(self, delay: Optional[float] = None) -> asyncio.Task:
        """Run sync() after a short delay on the running loop."""
        task = asyncio.create_task(self._delayed_sync(self.resync_delay if delay is None else delay))
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_tasks.discard)
        return task

    async def _delayed_sync(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.sync()

    async def wait_for_sync(self) -> None:
        """Wait for every scheduled sync to finish."""
        while self._sync_tasks:
            await asyncio.gather(*list(self._sync_tasks), return_exceptions=True)

    # Mutations

    async def add_item(self, product_id: Union[str, int], product: ProductInput = None) -> bool:
        """
        Add one unit of a product.

        Anonymous users are sent to the login page and the attempt is parked
        for replay after login; nothing is sent to the server in that case.

        Returns:
            True if the server accepted the add, False on redirect or failure
        """
        product_id = str(product_id)
        snapshot = ProductSnapshot.model_validate(product) if isinstance(product, dict) else product

        if not self.is_authenticated:
            logger.info("User not logged in, redirecting to login")
            self.relay.park(product_id, snapshot, self.navigator.current_url)
            self.navigator.push(self.login_path)
            return False

        previous = self._find(product_id)
        if previous is not None:
            updated = previous.model_copy(update={
                "quantity": previous.quantity + 1,
                "product": snapshot or previous.product
            })
            self._set_items([updated if item is previous else item for item in self._items])
        else:
            self._set_items(self._items + [CartItem(product_id=product_id, quantity=1, product=snapshot)])

        if self.notifier is not None:
            shown = snapshot or (previous.product if previous else None)
            self.notifier.notify(shown.name if shown and shown.name else "Item")

        try:
            await self.remote.add_item(product_id, 1)
        except RemoteCartError as e:
            logger.error(f"Failed to add {product_id} on server, reverting: {e}")
            self._revert_add(product_id, previous)
            return False

        self.schedule_sync()
        return True

    def _revert_add(self, product_id: str, previous: Optional[CartItem]) -> None:
        # Undo exactly one unit so concurrent adds of the same product survive
        current = self._find(product_id)
        if current is None:
            return

        if current.quantity <= 1:
            self._set_items([item for item in self._items if item is not current])
            return

        reverted = current.model_copy(update={
            "quantity": current.quantity - 1,
            "product": previous.product if previous is not None else current.product
        })
        self._set_items([reverted if item is current else item for item in self._items])

    async def remove_item(self, product_id: Union[str, int]) -> None:
        """
        Remove a line locally, then on the server.

        A server failure is logged and not rolled back; the follow-up sync
        brings local state back in line with the server.
        """
        product_id = str(product_id)
        self._set_items([item for item in self._items if item.product_id != product_id])

        if not self.is_authenticated:
            return

        try:
            await self.remote.remove_item(product_id)
        except RemoteCartError as e:
            logger.error(f"Failed to remove {product_id} on server: {e}")

        self.schedule_sync()

    async def update_quantity(self, product_id: Union[str, int], quantity: int) -> None:
        """Set a line's quantity. Zero or less removes the line."""
        product_id = str(product_id)

        if quantity <= 0:
            await self.remove_item(product_id)
            return

        self._set_items([
            item.model_copy(update={"quantity": quantity}) if item.product_id == product_id else item
            for item in self._items
        ])

        if not self.is_authenticated:
            return

        try:
            await self.remote.update_quantity(product_id, quantity)
        except RemoteCartError as e:
            logger.error(f"Failed to update {product_id} on server: {e}")

        self.schedule_sync()

    async def clear_cart(self) -> None:
        """Empty the cart locally and, for logged-in users, on the server in one call."""
        self._set_items([])

        if not self.is_authenticated:
            return

        try:
            await self.remote.clear()
            logger.info("Server cart cleared")
        except RemoteCartError as e:
            logger.error(f"Failed to clear server cart: {e}")

        self.schedule_sync()

    # Queries

    def get_cart_items(self) -> List[CartItem]:
        return self.items

    def get_cart_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def get_cart_total(self) -> float:
        """Sum of price x quantity. Lines without a product snapshot count as 0."""
        return sum(item.product.price * item.quantity for item in self._items if item.product)

    def is_in_cart(self, product_id: Union[str, int]) -> bool:
        return self._find(str(product_id)) is not None

    def get_item_quantity(self, product_id: Union[str, int]) -> int:
        item = self._find(str(product_id))
        return item.quantity if item else 0

    # Checkout

    async def validate_cart(self) -> CartValidation:
        """Local snapshot checks, plus server checks for logged-in users."""
        errors = validate_items(self._items)

        if self.is_authenticated:
            try:
                errors.extend(await self.remote.validate())
            except RemoteCartError as e:
                logger.error(f"Failed to validate cart with server: {e}")
                errors.append("Unable to validate cart with server")

        return CartValidation(valid=not errors, errors=errors)

    async def checkout(
        self,
        shipping_address: Dict[str, Any],
        payment_method: str,
        email: str,
        bank_receipt_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Place an order for the current cart and empty it on success.

        Raises:
            RemoteCartError: If the order was rejected; the cart is left as is
        """
        order = {
            "items": [
                {
                    "productId": item.product_id,
                    "quantity": item.quantity,
                    "price": item.product.price if item.product else None
                }
                for item in self._items
            ],
            "shippingAddress": shipping_address,
            "paymentMethod": payment_method,
            "totalAmount": self.get_cart_total(),
            "email": email,
            "bankReceiptUrl": bank_receipt_url
        }

        result = await self.remote.checkout(order)
        logger.info(f"Order placed: {result.get('orderNumber')}")

        # The server clears its copy as part of checkout
        self._set_items([])
        return result

    # Session

    async def login(self, email: str, password: str) -> bool:
        """
        Log in, pull the server cart and replay any add parked before login.

        Returns:
            True if a parked item was added
        """
        await self.remote.login(email, password)
        await self.sync()
        return await self.relay.replay()

    def close(self) -> None:
        """Cancel scheduled syncs and the notification timer."""
        for task in list(self._sync_tasks):
            task.cancel()
        if self.notifier is not None:
            self.notifier.close()
