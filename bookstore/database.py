"""
MongoDB data access for the book catalog.
Handles connection lifecycle, indexing, and CRUD operations on Book documents.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from bson.decimal128 import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, PyMongoError

from .errors import (
    BookNotFoundError,
    ReadFailedError,
    StoreUnavailableError,
    WriteFailedError,
)
from .models import Book, BookDraft, BookPatch, new_id

logger = structlog.get_logger(__name__)

# MongoDB's own _id never leaves the store
BOOK_PROJECTION = {"_id": 0}


def _to_document(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert model values to their BSON representation."""
    document = dict(values)
    if isinstance(document.get("price"), Decimal):
        document["price"] = Decimal128(document["price"])
    return document


def _from_document(document: Dict[str, Any]) -> Book:
    """Build a Book from a stored document."""
    document = dict(document)
    document.pop("_id", None)
    if isinstance(document.get("price"), Decimal128):
        document["price"] = document["price"].to_decimal()
    return Book(**document)


class BookStore:
    """
    CRUD access to the Book collection, addressed by the ``id`` field.

    The store works on a collection handle it is given; connecting and
    closing the client is done through ``connect``/``disconnect`` by whoever
    owns the process lifetime.
    """

    def __init__(
        self,
        collection: Optional[AsyncIOMotorCollection] = None,
        client: Optional[AsyncIOMotorClient] = None,
    ):
        self.collection = collection
        self.client = client

    @classmethod
    def from_config(cls, config) -> "BookStore":
        """
        Build a store from a StoreConfig without opening any connection.

        Args:
            config: StoreConfig with MongoDB settings

        Returns:
            BookStore bound to the configured collection
        """
        client = AsyncIOMotorClient(
            config.mongodb_url,
            serverSelectionTimeoutMS=config.mongodb_server_selection_timeout_ms,
        )
        collection = client[config.mongodb_database][config.mongodb_collection]
        return cls(collection=collection, client=client)

    async def connect(self) -> None:
        """Verify connectivity and create the unique id index."""
        try:
            await self.ping()
            await self.collection.create_index("id", unique=True)
            logger.info("Successfully connected to MongoDB",
                        database=self.collection.database.name,
                        collection=self.collection.name)
        except StoreUnavailableError as e:
            logger.error("Failed to connect to MongoDB", error=e.message)
            raise
        except PyMongoError as e:
            logger.error("Failed to create MongoDB indexes", error=str(e))
            raise StoreUnavailableError(f"Failed to connect to MongoDB: {e}") from e

    async def disconnect(self) -> None:
        """Close the MongoDB client."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def ping(self) -> None:
        """Round-trip to the server; raises StoreUnavailableError when unreachable."""
        try:
            await self.collection.database.command("ping")
        except PyMongoError as e:
            raise StoreUnavailableError(f"MongoDB is unreachable: {e}") from e

    async def create_book(self, draft: BookDraft) -> Book:
        """
        Insert a new book with a freshly generated id.

        Args:
            draft: Book payload without an id

        Returns:
            The stored Book, including its id
        """
        book = Book(id=new_id(), **draft.model_dump())
        try:
            await self.collection.insert_one(_to_document(book.model_dump()))
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable while creating book", error=str(e))
            raise StoreUnavailableError(f"Failed to create book: {e}") from e
        except PyMongoError as e:
            logger.error("Failed to create book", book_name=draft.name, error=str(e))
            raise WriteFailedError(f"Failed to create book: {e}") from e

        logger.info("Created book", book_id=book.id, book_name=book.name)
        return book

    async def get_book(self, book_id: str) -> Book:
        """
        Retrieve the book whose id equals ``book_id``.

        Raises:
            BookNotFoundError: if no document has that id
        """
        document = await self._find_one(book_id)
        if document is None:
            logger.debug("Book not found", book_id=book_id)
            raise BookNotFoundError(book_id)
        return _from_document(document)

    async def get_books(self) -> List[Book]:
        """Return every book in store order. An empty collection yields []."""
        try:
            cursor = self.collection.find({}, BOOK_PROJECTION)
            documents = await cursor.to_list(length=None)
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable while listing books", error=str(e))
            raise StoreUnavailableError(f"Failed to list books: {e}") from e
        except PyMongoError as e:
            logger.error("Failed to list books", error=str(e))
            raise ReadFailedError(f"Failed to list books: {e}") from e

        logger.debug("Retrieved books", count=len(documents))
        return [_from_document(document) for document in documents]

    async def update_book(self, book_id: str, patch: BookPatch) -> Book:
        """
        Apply a partial update to an existing book.

        Fields missing from the patch keep their stored value and the id is
        never rewritten. Nothing is written when the book does not exist.

        Args:
            book_id: Id of the book to update
            patch: Fields to overwrite

        Returns:
            The full Book after the update

        Raises:
            BookNotFoundError: if no document has that id
        """
        existing = await self._find_one(book_id)
        if existing is None:
            logger.warning("Book not found for update", book_id=book_id)
            raise BookNotFoundError(book_id)

        changes = patch.changes()
        if not changes:
            return _from_document(existing)

        try:
            updated = await self.collection.find_one_and_update(
                {"id": book_id},
                {"$set": _to_document(changes)},
                projection=BOOK_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable while updating book", book_id=book_id, error=str(e))
            raise StoreUnavailableError(f"Failed to update book: {e}", book_id=book_id) from e
        except PyMongoError as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise WriteFailedError(f"Failed to update book: {e}", book_id=book_id) from e

        # Removed between the existence check and the write
        if updated is None:
            logger.warning("Book removed before update", book_id=book_id)
            raise BookNotFoundError(book_id)

        logger.info("Updated book", book_id=book_id, fields=sorted(changes))
        return _from_document(updated)

    async def remove_book(self, book_id: str) -> None:
        """
        Delete the book whose id equals ``book_id``.

        Raises:
            BookNotFoundError: if no document has that id
        """
        existing = await self._find_one(book_id)
        if existing is None:
            logger.warning("Book not found for deletion", book_id=book_id)
            raise BookNotFoundError(book_id)

        try:
            result = await self.collection.delete_one({"id": book_id})
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable while deleting book", book_id=book_id, error=str(e))
            raise StoreUnavailableError(f"Failed to delete book: {e}", book_id=book_id) from e
        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise WriteFailedError(f"Failed to delete book: {e}", book_id=book_id) from e

        if result.deleted_count == 0:
            logger.warning("Book removed before deletion", book_id=book_id)
            raise BookNotFoundError(book_id)

        logger.info("Deleted book", book_id=book_id)

    async def _find_one(self, book_id: str) -> Optional[Dict[str, Any]]:
        """Exact match on the id field; None means no such document."""
        try:
            return await self.collection.find_one({"id": book_id}, BOOK_PROJECTION)
        except ConnectionFailure as e:
            logger.error("MongoDB unavailable while reading book", book_id=book_id, error=str(e))
            raise StoreUnavailableError(f"Failed to read book: {e}", book_id=book_id) from e
        except PyMongoError as e:
            logger.error("Failed to read book", book_id=book_id, error=str(e))
            raise ReadFailedError(f"Failed to read book: {e}", book_id=book_id) from e
