import os, sys
# Ensure project root is on sys.path so tests can import application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import re
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import get_settings


class InMemoryProductStore:
    """Product store double that keeps documents in a list.

    Mirrors the MongoDB store closely enough for the API tests: regex-style
    name search, exact category/brand match, sort, skip and limit (0 = no cap).
    Documents are returned as stored, BSON values included.
    """

    database_name = "gadget-world-test"

    def __init__(self, products=None, fail_with=None):
        self.products = [dict(p) for p in (products or [])]
        self.fail_with = fail_with
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if self.fail_with is not None:
            raise self.fail_with

    def _matches(self, doc, criteria):
        if criteria is None:
            return True
        if criteria.search and not re.search(re.escape(criteria.search), doc.get("name") or "", re.IGNORECASE):
            return False
        if criteria.category and doc.get("category") != criteria.category:
            return False
        if criteria.brand and doc.get("brand") != criteria.brand:
            return False
        return True

    def find_products(self, criteria, sort, pagination):
        self._check("find")
        rows = [dict(p) for p in self.products if self._matches(p, criteria)]
        if sort is not None:
            rows.sort(key=lambda p: p.get(sort.field) or "", reverse=sort.descending)
        if pagination.skip < 0:
            raise ValueError("skip must be >= 0")
        rows = rows[pagination.skip:]
        # 0 is no cap; a negative limit caps at abs(limit), like the driver
        if pagination.limit:
            rows = rows[:abs(pagination.limit)]
        return rows

    def count_products(self, criteria=None):
        self._check("count")
        return sum(1 for p in self.products if self._matches(p, criteria))

    def distinct_values(self, field):
        self._check("distinct")
        seen = []
        for p in self.products:
            value = p.get(field)
            if value not in seen:
                seen.append(value)
        return seen


TWO_PRODUCTS = [
    {"name": "A", "brand": "X", "category": "C1", "price": "10"},
    {"name": "B", "brand": "Y", "category": "C2", "price": "20"},
]


def make_catalog(count=25):
    """Gadgets with predictable names, prices and alternating brands/categories"""
    brands = ["Apple", "Samsung", "Xiaomi"]
    categories = ["Phones", "Laptops"]
    return [
        {
            "name": f"Gadget {i:02d}",
            "brand": brands[i % len(brands)],
            "category": categories[i % len(categories)],
            "price": f"{(i + 1) * 10}.00",
        }
        for i in range(count)
    ]


@pytest.fixture
def settings():
    return get_settings(MONGO_URI="mongodb://localhost:27017")


@pytest.fixture
def make_client(settings):
    def _make(products=None, fail_with=None, raise_server_exceptions=True):
        store = InMemoryProductStore(products, fail_with=fail_with)
        app = create_app(store, settings)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)
    return _make


@pytest.fixture
def client(make_client):
    return make_client(TWO_PRODUCTS)


@pytest.fixture
def catalog_client(make_client):
    return make_client(make_catalog())
