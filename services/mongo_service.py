from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError
from pymongo.server_api import ServerApi
from bson import ObjectId, json_util
from bson.binary import Binary
from bson.code import Code
from bson.dbref import DBRef
from bson.decimal128 import Decimal128
from bson.max_key import MaxKey
from bson.min_key import MinKey
from bson.regex import Regex
from bson.timestamp import Timestamp
from typing import List, Dict, Any, Optional, Protocol
import logging
import re

from config import Settings
from models.query import FilterCriteria, Pagination, SortSpec

logger = logging.getLogger(__name__)


class ProductStore(Protocol):
    """Read-only access to the product collection used by the catalog service."""

    database_name: str

    def find_products(self, criteria: FilterCriteria, sort: Optional[SortSpec],
                      pagination: Pagination) -> List[Dict[str, Any]]:
        """Return one page of products matching ``criteria``."""
        ...

    def count_products(self, criteria: Optional[FilterCriteria] = None) -> int:
        """Count products matching ``criteria`` (all products when None)."""
        ...

    def distinct_values(self, field: str) -> List[Any]:
        """Distinct values of ``field`` across the collection."""
        ...


def build_mongo_filter(criteria: Optional[FilterCriteria]) -> Dict[str, Any]:
    """Translate filter criteria into a MongoDB query document"""
    filter_query: Dict[str, Any] = {}
    if criteria is None or criteria.is_empty():
        return filter_query

    if criteria.search:
        # Literal substring match on the product name, case-insensitive. The text is
        # escaped on purpose: user input is never interpreted as a regular expression
        filter_query["name"] = {"$regex": re.escape(criteria.search), "$options": "i"}

    if criteria.category:
        filter_query["category"] = criteria.category

    if criteria.brand:
        filter_query["brand"] = criteria.brand

    return filter_query


_EXTENDED_JSON_TYPES = (Binary, Code, DBRef, MaxKey, MinKey, Regex, Timestamp, bytes)


def to_jsonable(value: Any) -> Any:
    """Make a stored value JSON friendly, recursing into embedded documents and arrays.

    ObjectIds become their hex string and Decimal128 its decimal string; other
    BSON-only types use their extended JSON form.
    """
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return str(value)
    if isinstance(value, _EXTENDED_JSON_TYPES):
        return to_jsonable(json_util.default(value))
    return value


class MongoProductStore:
    """MongoDB-backed product store for the gadget catalog"""

    def __init__(self, products: Collection, database_name: str, client: Optional[MongoClient] = None):
        self.products = products
        self.database_name = database_name
        self.client = client

    def find_products(self, criteria: FilterCriteria, sort: Optional[SortSpec],
                      pagination: Pagination) -> List[Dict[str, Any]]:
        filter_query = build_mongo_filter(criteria)
        logger.debug(f"find products: filter={filter_query}, sort={sort}, skip={pagination.skip}, limit={pagination.limit}")

        cursor = self.products.find(filter_query)
        if sort is not None:
            cursor = cursor.sort(sort.field, DESCENDING if sort.descending else ASCENDING)
        cursor = cursor.skip(pagination.skip).limit(pagination.limit)

        return [to_jsonable(doc) for doc in cursor]

    def count_products(self, criteria: Optional[FilterCriteria] = None) -> int:
        return self.products.count_documents(build_mongo_filter(criteria))

    def distinct_values(self, field: str) -> List[Any]:
        # Grouping keeps the store's own ordering; products missing the field yield None
        pipeline = [
            {"$group": {"_id": f"${field}"}},
            {"$project": {"_id": 0, field: "$_id"}},
        ]
        return [to_jsonable(row.get(field)) for row in self.products.aggregate(pipeline)]

    def close(self):
        """Close MongoDB connection"""
        if self.client is not None:
            self.client.close()
            logger.info("✅ MongoDB connection closed")


def connect_product_store(settings: Settings) -> MongoProductStore:
    """Open the MongoDB connection and verify it with a ping.

    Raises the driver error when the server cannot be reached; a missing
    MONGO_URI is reported the same way, as a ConfigurationError.
    """
    if not settings.MONGO_URI:
        raise ConfigurationError("MONGO_URI is not set")

    logger.info("Connecting to MongoDB...")
    client = MongoClient(
        settings.MONGO_URI,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        appname="GadgetWorldCatalog",
    )
    try:
        client.admin.command("ping")
    except Exception:
        client.close()
        raise

    db = client[settings.MONGO_DB]
    products: Collection = db[settings.MONGO_PRODUCTS_COLLECTION]
    logger.info(f"✅ Connected to MongoDB database: {settings.MONGO_DB}")
    return MongoProductStore(products, database_name=settings.MONGO_DB, client=client)
