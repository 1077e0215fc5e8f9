"""
Query building blocks for the product listing.

Everything here is independent of HTTP and of MongoDB: raw query-string
values go in, immutable values describing the query come out. Numbers are
parsed the way the storefront client has always sent them (``parseInt`` /
``parseFloat`` style, a leading numeric prefix is enough), and anything
that does not parse falls back to a default instead of being rejected.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_INT_PREFIX = re.compile(r'^\s*([+-]?[0-9]+)')
_FLOAT_PREFIX = re.compile(r'^\s*([+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))')


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of ``value`` ("12abc" -> 12). None when there is none."""
    if value is None:
        return None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value: Any) -> float:
    """Parse the leading decimal of ``value``; NaN when it has none.

    Numbers stored as real numbers in a document are accepted as they are.
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else math.nan


@dataclass(frozen=True)
class FilterCriteria:
    """Which products a listing should match. Unset fields match everything."""
    search: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.search or self.category or self.brand)


@dataclass(frozen=True)
class SortSpec:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PriceRange:
    """Inclusive price bounds applied to an already fetched page."""
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def is_open(self) -> bool:
        return self.minimum is None and self.maximum is None

    def contains(self, price: Any) -> bool:
        value = parse_float(price)
        # NaN never satisfies a comparison, so an unparsable price fails any bound
        if self.minimum is not None and not value >= self.minimum:
            return False
        if self.maximum is not None and not value <= self.maximum:
            return False
        return True


def build_filter_criteria(search: Optional[str] = None, category: Optional[str] = None,
                          brand: Optional[str] = None) -> FilterCriteria:
    """Each non-empty parameter narrows the filter; empty ones are ignored."""
    return FilterCriteria(
        search=search or None,
        category=category or None,
        brand=brand or None,
    )


def parse_sort(sort_by: Optional[str]) -> Optional[SortSpec]:
    """Turn ``"price-desc"`` into a SortSpec. None keeps the store's natural order.

    The field is everything before the first dash; the direction is the next
    dash-separated segment and only ``desc`` means descending.
    """
    if not sort_by:
        return None
    field, _, rest = sort_by.partition("-")
    direction = rest.split("-", 1)[0]
    return SortSpec(field=field, descending=direction == "desc")


def parse_pagination(page: Optional[str] = None, limit: Optional[str] = None) -> Pagination:
    page_num = parse_int(page)
    limit_num = parse_int(limit)

    if page_num is None or page_num < 1:
        page_num = DEFAULT_PAGE
    # Any parsed limit is passed through as-is: 0 means "no cap" and a negative
    # limit returns at most abs(limit) documents, as the driver defines them
    if limit_num is None:
        limit_num = DEFAULT_LIMIT

    return Pagination(page=page_num, limit=limit_num)


def parse_price_range(min_price: Optional[str] = None, max_price: Optional[str] = None) -> PriceRange:
    def _bound(raw: Optional[str]) -> Optional[float]:
        if not raw:
            return None
        value = parse_float(raw)
        return None if math.isnan(value) else value

    return PriceRange(minimum=_bound(min_price), maximum=_bound(max_price))


def apply_price_filter(products: Iterable[Dict[str, Any]], price_range: PriceRange) -> List[Dict[str, Any]]:
    """Drop products whose ``price`` falls outside ``price_range``.

    This runs on the page the store already returned, so a page can come back
    shorter than its limit and the totals ignore the price bounds.
    """
    if price_range.is_open():
        return list(products)
    return [p for p in products if price_range.contains(p.get("price"))]
