from typing import Optional
from pydantic import BaseModel


class CategoryResponse(BaseModel):
    """Catalog category."""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    featured: bool = False
    product_count: Optional[int] = None

    class Config:
        from_attributes = True
