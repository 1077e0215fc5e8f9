"""
Gadget World Catalog API
"""

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional, List, Any
import logging

from config import Settings, get_settings
from models.schemas import ErrorResponse, HealthResponse, ProductsPage
from services.catalog_service import CatalogService
from services.errors import CatalogQueryError
from services.mongo_service import ProductStore

logger = logging.getLogger(__name__)


def get_catalog_service(request: Request) -> CatalogService:
    """Catalog service bound to the app at construction time"""
    return request.app.state.catalog_service


def create_app(store: ProductStore, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an already connected product store.

    The store is injected so tests (or another backend) can stand in for
    MongoDB without touching the routes.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Gadget World Catalog API",
        description="Read-only product catalog: filtering, sorting, pagination, brand and category facets",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.catalog_service = CatalogService(store)

    # Only the known storefront origins may call the API from a browser
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/products", response_model=ProductsPage)
    def get_products(
        search: Optional[str] = None,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        min_price: Optional[str] = Query(default=None, alias="minPrice"),
        max_price: Optional[str] = Query(default=None, alias="maxPrice"),
        sort_by: Optional[str] = Query(default=None, alias="sortBy"),
        page: Optional[str] = None,
        limit: Optional[str] = None,
        catalog: CatalogService = Depends(get_catalog_service),
    ):
        """Products with filters, sorting and pagination. Price bounds apply to the returned page."""
        return catalog.list_products(
            search=search,
            category=category,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )

    @app.get("/brands")
    def get_brands(catalog: CatalogService = Depends(get_catalog_service)) -> List[Any]:
        """Distinct brands across all products"""
        return catalog.list_brands()

    @app.get("/categories")
    def get_categories(catalog: CatalogService = Depends(get_catalog_service)) -> List[Any]:
        """Distinct categories across all products"""
        return catalog.list_categories()

    @app.get("/health", response_model=HealthResponse)
    def health_check(catalog: CatalogService = Depends(get_catalog_service)):
        return HealthResponse(
            status="ok",
            database=catalog.store.database_name,
            products_count=catalog.count_all(),
        )

    # Error handlers
    @app.exception_handler(CatalogQueryError)
    async def catalog_query_error_handler(request: Request, exc: CatalogQueryError):
        """Store failures become a 500; only product listings carry the details"""
        body = ErrorResponse(details=exc.details if exc.expose_details else None)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def universal_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse().model_dump(exclude_none=True))

    return app
