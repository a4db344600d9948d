import asyncio
import logging
from typing import Callable, List, Optional

from storefront.core.config import settings

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[str]], None]


class CartNotifier:
    """Transient "added to cart" message that dismisses itself after a delay."""

    def __init__(self, dismiss_after: float = settings.CART_NOTIFICATION_SECONDS):
        self.dismiss_after = dismiss_after
        self.current: Optional[str] = None
        self._listeners: List[Listener] = []
        self._timer: Optional[asyncio.TimerHandle] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self.current)

    def notify(self, product_name: str) -> None:
        """Show a message for the added item and schedule its dismissal."""
        self._cancel_timer()
        self.current = f"{product_name} added to cart"
        self._emit()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop, the message stays until dismiss() is called
            return
        self._timer = loop.call_later(self.dismiss_after, self.dismiss)

    def dismiss(self) -> None:
        self._timer = None
        if self.current is None:
            return
        self.current = None
        self._emit()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        self._cancel_timer()
