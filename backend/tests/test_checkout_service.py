"""
Tests for order placement at checkout.
"""
import re
import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import HTTPException, status
from bson import ObjectId

from storefront.schemas.order import CheckoutRequest
from storefront.services.checkout_service import CheckoutService
from storefront.utils.helpers import generate_order_number

from conftest import FakeCarts

PRODUCT_ID = str(ObjectId())


def make_request(**overrides):
    data = {
        "items": [{"productId": PRODUCT_ID, "quantity": 2}],
        "shippingAddress": {"line1": "1 Main St", "city": "Lagos"},
        "paymentMethod": "bank_transfer",
        "totalAmount": 20.0,
        "email": "user@example.com"
    }
    data.update(overrides)
    return CheckoutRequest.model_validate(data)


def make_db(product=None, modified_count=1):
    mock_db = MagicMock()
    mock_db.products.find_one = AsyncMock(return_value=product)
    mock_db.products.update_one = AsyncMock(return_value=MagicMock(modified_count=modified_count))
    mock_db.orders.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    mock_db.carts = FakeCarts({"_id": ObjectId(), "user_id": "user123", "items": [{"product_id": PRODUCT_ID, "quantity": 2}]})
    return mock_db


class TestValidateRequest:
    """Test request checks made before any database access."""

    def test_empty_cart(self):
        """Test an order without items is rejected."""
        with pytest.raises(HTTPException) as exc_info:
            CheckoutService.validate_request(make_request(items=[]))

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert exc_info.value.detail == "Cart is empty"

    def test_missing_fields(self):
        """Test an order without shipping address is rejected."""
        with pytest.raises(HTTPException) as exc_info:
            CheckoutService.validate_request(make_request(shippingAddress=None))

        assert exc_info.value.detail == "Missing required fields"


class TestPlaceOrder:
    """Test creating orders."""

    @pytest.mark.asyncio
    async def test_place_order(self):
        """Test a valid order is stored, stock reserved and the cart cleared."""
        mock_db = make_db(product={"_id": ObjectId(PRODUCT_ID), "price": 10.0, "stock_quantity": 5})

        order = await CheckoutService.place_order("user123", make_request(), mock_db)

        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"
        assert order["items"][0]["unit_price"] == 10.0
        assert order["items"][0]["total_price"] == 20.0
        mock_db.orders.insert_one.assert_awaited_once()
        assert mock_db.carts.lines("user123") == []

        stock_update = mock_db.products.update_one.await_args
        assert stock_update.args[1] == {"$inc": {"stock_quantity": -2}}

    @pytest.mark.asyncio
    async def test_submitted_price_is_used(self):
        """Test the line price sent by the client is kept when present."""
        mock_db = make_db(product={"price": 10.0, "stock_quantity": 5})

        order = await CheckoutService.place_order(
            "user123",
            make_request(items=[{"productId": PRODUCT_ID, "quantity": 1, "price": 8.5}]),
            mock_db
        )

        assert order["items"][0]["unit_price"] == 8.5

    @pytest.mark.asyncio
    async def test_unknown_product(self):
        """Test an order for a deleted product is a 404."""
        mock_db = make_db(product=None)

        with pytest.raises(HTTPException) as exc_info:
            await CheckoutService.place_order("user123", make_request(), mock_db)

        assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
        mock_db.orders.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_stock(self):
        """Test ordering more than the stock is a 400."""
        mock_db = make_db(product={"price": 10.0, "stock_quantity": 1})

        with pytest.raises(HTTPException) as exc_info:
            await CheckoutService.place_order("user123", make_request(), mock_db)

        assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
        assert "Insufficient stock" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_stock_race_restores_reserved_lines(self):
        """Test a line losing the stock race puts back earlier reservations."""
        other_id = str(ObjectId())
        mock_db = make_db(product={"price": 10.0, "stock_quantity": 5})
        mock_db.products.update_one = AsyncMock(side_effect=[
            MagicMock(modified_count=1),
            MagicMock(modified_count=0),
            MagicMock(modified_count=1)
        ])
        request = make_request(items=[
            {"productId": PRODUCT_ID, "quantity": 1},
            {"productId": other_id, "quantity": 1}
        ])

        with pytest.raises(HTTPException):
            await CheckoutService.place_order("user123", request, mock_db)

        restore = mock_db.products.update_one.await_args_list[-1]
        assert restore.args[1] == {"$inc": {"stock_quantity": 1}}
        mock_db.orders.insert_one.assert_not_awaited()


class TestOrderNumber:
    """Test order number generation."""

    def test_format(self):
        """Test order numbers look like DVZ-<ms>-<9 chars>."""
        assert re.fullmatch(r"DVZ-\d{13}-[A-Z0-9]{9}", generate_order_number())

    def test_unique(self):
        """Test consecutive order numbers differ."""
        assert generate_order_number() != generate_order_number()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
