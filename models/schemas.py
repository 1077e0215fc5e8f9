from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ProductsPage(BaseModel):
    """Body of GET /products. ``data`` holds the product documents as stored."""
    model_config = ConfigDict(populate_by_name=True)

    data: List[Dict[str, Any]] = Field(default_factory=list, description="Products on this page, after the price filter")
    total: int = Field(..., description="Number of products in the collection")
    total_filtered_products: int = Field(
        ...,
        alias="totalFilteredProducts",
        description="Number of products matching search/category/brand (price bounds not counted)",
    )


class ErrorResponse(BaseModel):
    error: str = "Internal Server Error"
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    database: str
    products_count: int
