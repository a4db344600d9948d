from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from storefront.api.deps import get_db
from storefront.api.routes.products import product_to_response
from storefront.schemas.category import CategoryResponse
from storefront.schemas.product import ProductResponse

router = APIRouter()

FEATURED_LIMIT = 6


def category_to_response(category: dict, product_count: int = None) -> CategoryResponse:
    return CategoryResponse(
        id=str(category["_id"]),
        name=category["name"],
        slug=category["slug"],
        description=category.get("description"),
        image=category.get("image"),
        featured=bool(category.get("featured", False)),
        product_count=product_count
    )


async def _get_category_or_404(slug: str, db: AsyncIOMotorDatabase) -> dict:
    category = await db.categories.find_one({"slug": slug})

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    return category


@router.get("", response_model=List[CategoryResponse])
async def get_categories(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Get all categories ordered by name.
    """
    categories = await db.categories.find({}).sort("name", 1).to_list(length=None)
    return [category_to_response(category) for category in categories]


@router.get("/featured", response_model=List[CategoryResponse])
async def get_featured_categories(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Get featured categories with the number of products in each.
    """
    categories = await db.categories.find({"featured": True}).sort("name", 1).limit(
        FEATURED_LIMIT
    ).to_list(length=FEATURED_LIMIT)

    response = []
    for category in categories:
        product_count = await db.products.count_documents({"category": category["name"]})
        response.append(category_to_response(category, product_count))

    return response


@router.get("/{slug}", response_model=CategoryResponse)
async def get_category(slug: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Get a single category by its slug.
    """
    category = await _get_category_or_404(slug, db)
    return category_to_response(category)


@router.get("/{slug}/products", response_model=List[ProductResponse])
async def get_category_products(slug: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Get published products of a category, newest first.
    """
    category = await _get_category_or_404(slug, db)

    products = await db.products.find(
        {"category": category["name"], "published": {"$ne": False}}
    ).sort("created_at", -1).to_list(length=None)

    return [product_to_response(product) for product in products]
