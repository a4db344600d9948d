"""
Tests for pre-checkout cart validation.
"""
import pytest

from storefront.client.models import CartItem, ProductSnapshot
from storefront.client.remote import RemoteCartError
from storefront.client.validation import validate_items


def item(product_id, quantity, **snapshot):
    product = ProductSnapshot(**snapshot) if snapshot else None
    return CartItem(product_id=product_id, quantity=quantity, product=product)


class TestValidateItems:
    """Test local snapshot checks."""

    def test_valid_cart(self):
        """Test a line within stock passes."""
        assert validate_items([item("p1", 2, name="Lamp", stock_count=5)]) == []

    def test_quantity_above_stock(self):
        """Test asking for more than the stock count is flagged by name."""
        errors = validate_items([item("p1", 5, name="Lamp", stock_count=2)])

        assert len(errors) == 1
        assert "Lamp" in errors[0]
        assert "2" in errors[0]

    def test_out_of_stock(self):
        """Test a snapshot marked out of stock is flagged."""
        errors = validate_items([item("p1", 1, name="Lamp", in_stock=False, stock_count=0)])
        assert errors == ["Lamp is out of stock"]

    def test_missing_snapshot(self):
        """Test a line without product data is reported as unavailable."""
        errors = validate_items([item("p9", 1)])
        assert errors == ["Product p9 is no longer available"]

    def test_unknown_stock_count_not_flagged(self):
        """Test a snapshot without a stock count only relies on in_stock."""
        assert validate_items([item("p1", 50, name="Lamp")]) == []


class TestValidateCart:
    """Test CartStore.validate_cart()."""

    @pytest.mark.asyncio
    async def test_stock_exceeded(self, cart, local_store):
        """Test quantity 5 with stock 2 is invalid with an error for that item."""
        local_store.save([item("p1", 5, name="Lamp", stock_count=2)])
        await cart.hydrate()

        result = await cart.validate_cart()

        assert result.valid is False
        assert any("Lamp" in error for error in result.errors)

    @pytest.mark.asyncio
    async def test_server_errors_appended(self, cart, remote):
        """Test server-reported errors are added after local ones."""
        remote.validate.return_value = ["Product p2 is no longer available"]

        result = await cart.validate_cart()

        assert result.valid is False
        assert result.errors == ["Product p2 is no longer available"]

    @pytest.mark.asyncio
    async def test_anonymous_skips_server(self, cart, remote):
        """Test anonymous validation is local only."""
        remote.is_authenticated = False

        result = await cart.validate_cart()

        assert result.valid is True
        remote.validate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_server_failure_reported(self, cart, remote):
        """Test an unreachable validation endpoint makes the cart invalid."""
        remote.validate.side_effect = RemoteCartError("down")

        result = await cart.validate_cart()

        assert result.valid is False
        assert result.errors == ["Unable to validate cart with server"]
