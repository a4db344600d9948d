from typing import List

from storefront.client.models import CartItem


def validate_items(items: List[CartItem]) -> List[str]:
    """
    Local pre-checkout checks against each line's product snapshot.

    Flags lines without a snapshot, lines whose product is out of stock,
    and lines asking for more than the known stock count.
    """
    errors = []

    for item in items:
        product = item.product

        if product is None:
            errors.append(f"Product {item.product_id} is no longer available")
            continue

        name = product.name or f"Product {item.product_id}"

        if not product.in_stock:
            errors.append(f"{name} is out of stock")
        elif product.stock_count is not None and item.quantity > product.stock_count:
            errors.append(
                f"Only {product.stock_count} of {name} available (requested {item.quantity})"
            )

    return errors
