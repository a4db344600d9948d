from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ProductResponse(BaseModel):
    """Catalog product as served to the storefront."""
    id: str
    name: str
    description: str
    price: float
    original_price: Optional[float] = None
    images: List[str]
    category: str
    stock_count: int = Field(alias="stockCount")
    in_stock: bool = Field(alias="inStock")
    featured: bool = False
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        from_attributes = True
