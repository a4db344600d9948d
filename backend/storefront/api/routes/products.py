from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db
from storefront.schemas.product import ProductResponse
from storefront.utils.helpers import to_object_id
from storefront.utils.images import normalize_images

router = APIRouter()


def product_to_response(product: dict) -> ProductResponse:
    """Build the storefront view of a product document."""
    stock_count = int(product.get("stock_quantity") or 0)
    name = product.get("title") or "Unnamed Product"

    return ProductResponse(
        id=str(product["_id"]),
        name=name,
        description=product.get("description") or "No description available",
        price=float(product.get("price") or 0),
        original_price=product.get("original_price"),
        images=normalize_images(product.get("images"), name),
        category=product.get("category") or "Uncategorized",
        stock_count=stock_count,
        in_stock=stock_count > 0,
        featured=bool(product.get("featured", False)),
        created_at=product.get("created_at")
    )


@router.get("", response_model=List[ProductResponse])
async def get_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get published products with optional filters.

    Filters:
    - category: Filter by product category
    - search: Case-insensitive match on title or description
    - featured: Only featured (or non-featured) products
    """
    query = {"published": {"$ne": False}}

    if category:
        query["category"] = category
    if featured is not None:
        query["featured"] = featured
    if search:
        query["$or"] = [
            {"title": {"$regex": search, "$options": "i"}},
            {"description": {"$regex": search, "$options": "i"}}
        ]

    products = await db.products.find(query).skip(skip).limit(limit).to_list(length=limit)

    return [product_to_response(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get a single product by ID.
    """
    product = await db.products.find_one({"_id": to_object_id(product_id)})

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    return product_to_response(product)
