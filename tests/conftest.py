"""
Pytest configuration and shared fixtures.
"""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument

from bookstore.database import BookStore
from bookstore.models import BookDraft


class InMemoryCursor:
    """Cursor returned by InMemoryCollection.find."""

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        if length is None:
            return list(self._documents)
        return list(self._documents[:length])


class InMemoryCollection:
    """
    Collection double for the subset of the motor API used by BookStore.
    Filters are exact field equality, as MongoDB applies them.
    """

    def __init__(self):
        self.documents = []
        self.indexes = []

    @staticmethod
    def _matches(document, filter_):
        return all(key in document and document[key] == value for key, value in filter_.items())

    @staticmethod
    def _project(document, projection):
        if projection and projection.get("_id") == 0:
            return {key: value for key, value in document.items() if key != "_id"}
        return dict(document)

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return keys

    async def insert_one(self, document):
        document["_id"] = ObjectId()
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, filter_, projection=None):
        for document in self.documents:
            if self._matches(document, filter_):
                return self._project(document, projection)
        return None

    def find(self, filter_=None, projection=None):
        matched = [
            self._project(document, projection)
            for document in self.documents
            if self._matches(document, filter_ or {})
        ]
        return InMemoryCursor(matched)

    async def find_one_and_update(self, filter_, update, projection=None,
                                  return_document=ReturnDocument.BEFORE):
        for document in self.documents:
            if self._matches(document, filter_):
                before = self._project(document, projection)
                document.update(update.get("$set", {}))
                if return_document == ReturnDocument.AFTER:
                    return self._project(document, projection)
                return before
        return None

    async def delete_one(self, filter_):
        for index, document in enumerate(self.documents):
            if self._matches(document, filter_):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.fixture
def memory_collection():
    """Empty in-memory book collection."""
    return InMemoryCollection()


@pytest.fixture
def book_store(memory_collection):
    """BookStore backed by the in-memory collection."""
    return BookStore(collection=memory_collection)


@pytest.fixture
def mock_collection():
    """Mock motor collection; find() is synchronous in motor."""
    collection = AsyncMock()
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_book_store(mock_collection):
    """BookStore over the mock collection."""
    return BookStore(collection=mock_collection)


@pytest.fixture
def dune_draft():
    """Draft used by the create/get/update/remove scenario."""
    return BookDraft(
        name="Dune",
        price=Decimal("12.50"),
        category="SciFi",
        author="Herbert"
    )


@pytest.fixture
def sample_drafts():
    """A handful of distinct drafts."""
    return [
        BookDraft(name="Dune", price=Decimal("12.50"), category="SciFi", author="Herbert"),
        BookDraft(name="Emma", price=Decimal("7.25"), category="Classic", author="Austen"),
        BookDraft(name="Free Book", price=Decimal("0"), category="Misc", author="Anonymous"),
    ]
