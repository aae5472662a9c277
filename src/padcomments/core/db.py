from typing import Any, Protocol

import structlog
from pymongo.asynchronous.collection import AsyncCollection

logger = structlog.get_logger(__name__)


class KeyValueStore(Protocol):
    """Whole-value key-value storage without transactions or partial updates."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def remove(self, key: str) -> None: ...


class MongoKeyValueStore:
    """Key-value store backed by a MongoDB collection, one document per key."""

    def __init__(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        self._collection = collection

    async def get(self, key: str) -> Any | None:
        doc = await self._collection.find_one({"_id": key})
        if doc is None:
            return None
        return doc.get("value")

    async def set(self, key: str, value: Any) -> None:
        """Replace the value stored under key, creating it if missing."""
        await self._collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)
        logger.debug("store_set", key=key)

    async def remove(self, key: str) -> None:
        result = await self._collection.delete_one({"_id": key})
        logger.debug("store_remove", key=key, deleted=result.deleted_count)
