from typing import List, Dict, Any, Optional
import logging

from models.query import (
    apply_price_filter,
    build_filter_criteria,
    parse_pagination,
    parse_price_range,
    parse_sort,
)
from services.errors import CatalogQueryError, FacetQueryError, ProductQueryError
from services.mongo_service import ProductStore, to_jsonable

logger = logging.getLogger(__name__)


class CatalogService:
    """Read-only catalog queries over an injected product store"""

    def __init__(self, store: ProductStore):
        self.store = store

    def list_products(self, search: Optional[str] = None, category: Optional[str] = None,
                      brand: Optional[str] = None, min_price: Optional[str] = None,
                      max_price: Optional[str] = None, sort_by: Optional[str] = None,
                      page: Optional[str] = None, limit: Optional[str] = None) -> Dict[str, Any]:
        """List one page of products.

        Parameters arrive as raw query-string values and are coerced here.
        The price bounds are applied to the fetched page only, so they change
        neither the page boundaries nor ``totalFilteredProducts``.
        """
        try:
            criteria = build_filter_criteria(search, category, brand)
            sort = parse_sort(sort_by)
            pagination = parse_pagination(page, limit)
            price_range = parse_price_range(min_price, max_price)

            products = [to_jsonable(doc) for doc in self.store.find_products(criteria, sort, pagination)]
            filtered_products = apply_price_filter(products, price_range)

            total = self.store.count_products()
            total_filtered = self.store.count_products(criteria)
        except Exception as e:
            logger.error(f"Error fetching products: {e}", exc_info=True)
            raise ProductQueryError("Error fetching products", cause=e) from e

        logger.debug(f"Listed {len(filtered_products)} products (page={pagination.page}, limit={pagination.limit})")
        return {
            "data": filtered_products,
            "total": total,
            "totalFilteredProducts": total_filtered,
        }

    def list_brands(self) -> List[Any]:
        return self._facet("brand", "brands")

    def list_categories(self) -> List[Any]:
        return self._facet("category", "categories")

    def count_all(self) -> int:
        try:
            return self.store.count_products()
        except Exception as e:
            logger.error(f"Error counting products: {e}", exc_info=True)
            raise CatalogQueryError("Error counting products", cause=e) from e

    def _facet(self, field: str, label: str) -> List[Any]:
        try:
            return [to_jsonable(value) for value in self.store.distinct_values(field)]
        except Exception as e:
            logger.error(f"Error fetching {label}: {e}", exc_info=True)
            raise FacetQueryError(f"Error fetching {label}", cause=e) from e
