"""
Shared fixtures for the cart client and API tests.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from storefront.client.cart import CartStore
from storefront.client.local_store import LocalCartStore
from storefront.client.navigation import HistoryNavigator
from storefront.client.remote import RemoteCartService
from storefront.client.storage import MemoryStorage

NOW_MS = 1_700_000_000_000


@pytest.fixture
def durable_storage():
    return MemoryStorage()


@pytest.fixture
def session_storage():
    return MemoryStorage()


@pytest.fixture
def local_store(durable_storage):
    return LocalCartStore(durable_storage, clock=lambda: NOW_MS)


@pytest.fixture
def navigator():
    return HistoryNavigator("/products/42")


@pytest.fixture
def remote():
    """Cart API client double. Authenticated, server cart empty, every call succeeds."""
    mock_remote = MagicMock(spec=RemoteCartService)
    mock_remote.is_authenticated = True
    mock_remote.fetch_cart = AsyncMock(return_value=[])
    mock_remote.add_item = AsyncMock(return_value={"success": True})
    mock_remote.remove_item = AsyncMock(return_value={"success": True})
    mock_remote.update_quantity = AsyncMock(return_value={"success": True})
    mock_remote.clear = AsyncMock(return_value={"success": True})
    mock_remote.validate = AsyncMock(return_value=[])
    mock_remote.checkout = AsyncMock(return_value={})
    mock_remote.login = AsyncMock(return_value={})
    return mock_remote


@pytest.fixture
def cart(local_store, remote, session_storage, navigator):
    store = CartStore(
        local_store=local_store,
        remote=remote,
        session_storage=session_storage,
        navigator=navigator,
        resync_delay=0
    )
    yield store
    store.close()


def product(product_id="p1", name="Widget", price=10.0, stock=5, in_stock=True):
    """Product snapshot payload as the storefront pages pass it to add_item()."""
    return {
        "id": product_id,
        "name": name,
        "price": price,
        "images": [f"/uploads/{product_id}.jpg"],
        "category": "electronics",
        "stockCount": stock,
        "inStock": in_stock
    }


def server_line(product_id="p1", quantity=1, name="Widget", price="10.00", stock=5, images=None):
    """One item of a GET /api/cart response."""
    return {
        "productId": product_id,
        "quantity": quantity,
        "name": name,
        "description": "",
        "price": price,
        "images": images,
        "category": "electronics",
        "stockQuantity": stock
    }


class FakeCarts:
    """
    In-memory stand-in for the carts collection.

    Supports the update operators the cart service uses. Every call yields to
    the event loop first so overlapping requests interleave as they would
    against a real server; each operation itself is applied atomically.
    """

    def __init__(self, *docs):
        self.docs = list(docs)

    def _matches(self, doc, query):
        for field, expected in query.items():
            if field == "items.product_id":
                ids = [line["product_id"] for line in doc["items"]]
                if isinstance(expected, dict):
                    if expected["$ne"] in ids:
                        return False
                elif expected not in ids:
                    return False
            elif doc.get(field) != expected:
                return False
        return True

    def _line(self, doc, query):
        return next(line for line in doc["items"] if line["product_id"] == query["items.product_id"])

    def _apply(self, doc, query, update):
        for field, value in update.get("$set", {}).items():
            if field.startswith("items.$."):
                self._line(doc, query)[field[len("items.$."):]] = value
            else:
                doc[field] = value
        for field, value in update.get("$inc", {}).items():
            self._line(doc, query)[field[len("items.$."):]] += value
        for field, value in update.get("$push", {}).items():
            doc[field].append(value)
        for field, condition in update.get("$pull", {}).items():
            doc[field] = [line for line in doc[field] if line["product_id"] != condition["product_id"]]

    async def find_one(self, query):
        await asyncio.sleep(0)
        return next((doc for doc in self.docs if self._matches(doc, query)), None)

    async def update_one(self, query, update, upsert=False):
        await asyncio.sleep(0)
        for doc in self.docs:
            if self._matches(doc, query):
                self._apply(doc, query, update)
                return MagicMock(matched_count=1, modified_count=1)
        return MagicMock(matched_count=0, modified_count=0)

    async def find_one_and_update(self, query, update, upsert=False, return_document=None):
        await asyncio.sleep(0)
        doc = next((doc for doc in self.docs if self._matches(doc, query)), None)
        if doc is None and upsert:
            doc = {"_id": ObjectId(), **query, **update.get("$setOnInsert", {})}
            self.docs.append(doc)
        return doc

    def lines(self, user_id):
        """(product_id, quantity) pairs of a user's cart."""
        doc = next(doc for doc in self.docs if doc["user_id"] == user_id)
        return [(line["product_id"], line["quantity"]) for line in doc["items"]]
