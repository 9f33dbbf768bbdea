"""
Base repository implementing common document operations over DocumentStore.

This module provides a generic repository pattern that can be extended
by collection-specific repositories. Every document read from the store is
validated into its pydantic schema at this boundary; malformed documents are
logged and skipped instead of leaking loosely-typed data into the services.
"""

from __future__ import annotations
from typing import Generic, TypeVar, Type, Optional, Any
from pydantic import BaseModel, ValidationError
from redis.exceptions import RedisError
import logging

from storefront.core.document_store import DocumentStore, Snapshot

logger = logging.getLogger(__name__)

# Generic type variable for the schema
T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Generic base repository for one document collection.

    Type Parameters:
        T: The pydantic schema documents of this collection validate into

    Example:
        class SalesRepository(BaseRepository[SaleRecord]):
            def __init__(self):
                super().__init__(SaleRecord, "sales")
    """

    def __init__(self, model: Type[T], collection: str):
        """
        Initialize the repository with a schema and collection name.

        Args:
            model: The pydantic schema documents are parsed into
            collection: Name of the store collection
        """
        self.model = model
        self.collection = collection

    def parse(self, doc_id: str, data: dict) -> Optional[T]:
        """
        Validate a raw document, returning None if it is malformed.

        Args:
            doc_id: Store id of the document (for logging)
            data: Raw document mapping

        Returns:
            Schema instance, or None when validation fails
        """
        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed %s document %s: %s",
                self.collection, doc_id, e.errors(include_url=False),
            )
            return None

    def parse_many(self, snapshots: list[Snapshot]) -> list[T]:
        items = []
        for snapshot in snapshots:
            item = self.parse(snapshot.id, snapshot.data)
            if item is not None:
                items.append(item)
        return items

    async def get(
        self,
        store: DocumentStore,
        id: Any
    ) -> Optional[T]:
        """
        Retrieve a single document by store id.

        Args:
            store: Document store
            id: Store id of the document

        Returns:
            Schema instance if found and valid, None otherwise
        """
        try:
            data = await store.get(self.collection, str(id))
        except RedisError as e:
            logger.error(f"Error fetching {self.collection} document {id}: {e}")
            raise
        if data is None:
            return None
        return self.parse(str(id), data)

    async def get_all(
        self,
        store: DocumentStore,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> list[T]:
        """
        Retrieve every valid document in the collection.

        Args:
            store: Document store
            order_by: Optional (dotted) field to sort by
            descending: Sort direction for order_by

        Returns:
            List of schema instances
        """
        try:
            snapshots = await store.query_all(self.collection, order_by=order_by, descending=descending)
        except RedisError as e:
            logger.error(f"Error fetching all {self.collection} documents: {e}")
            raise
        return self.parse_many(snapshots)

    async def find_by(
        self,
        store: DocumentStore,
        field: str,
        value: Any
    ) -> list[tuple[str, T]]:
        """
        Find documents whose field equals value.

        Returns:
            List of (store id, schema instance) tuples
        """
        try:
            snapshots = await store.query(self.collection, field, value)
        except RedisError as e:
            logger.error(f"Error querying {self.collection} by {field}={value!r}: {e}")
            raise
        results = []
        for snapshot in snapshots:
            item = self.parse(snapshot.id, snapshot.data)
            if item is not None:
                results.append((snapshot.id, item))
        return results

    async def create(
        self,
        store: DocumentStore,
        obj_in: dict
    ) -> str:
        """
        Append a new document under a generated id.

        Args:
            store: Document store
            obj_in: Document fields (store aliases, sentinels allowed)

        Returns:
            Generated store id
        """
        try:
            return await store.add(self.collection, obj_in)
        except RedisError as e:
            logger.error(f"Error creating {self.collection} document: {e}")
            raise

    async def update(
        self,
        store: DocumentStore,
        id: Any,
        obj_in: dict
    ) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        try:
            await store.update(self.collection, str(id), obj_in)
        except RedisError as e:
            logger.error(f"Error updating {self.collection} document {id}: {e}")
            raise

    async def delete(
        self,
        store: DocumentStore,
        id: Any
    ) -> bool:
        """
        Delete a document by store id.

        Returns:
            True if deleted, False if not found
        """
        try:
            return await store.delete(self.collection, str(id))
        except RedisError as e:
            logger.error(f"Error deleting {self.collection} document {id}: {e}")
            raise
