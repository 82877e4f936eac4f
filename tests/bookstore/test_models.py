"""
Unit tests for the Book models.
Tests validation, patch semantics and id generation.
"""

import json
from decimal import Decimal

import pytest
from bson import ObjectId
from pydantic import ValidationError

from bookstore.models import Book, BookDraft, BookPatch, new_id


class TestNewId:
    """Test cases for id generation."""

    def test_new_id_is_object_id_hex(self):
        book_id = new_id()
        assert isinstance(book_id, str)
        assert len(book_id) == 24
        assert ObjectId.is_valid(book_id)

    def test_new_ids_are_unique(self):
        ids = {new_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestBookDraft:
    """Test cases for BookDraft model."""

    def test_valid_draft(self, dune_draft):
        assert dune_draft.name == "Dune"
        assert dune_draft.price == Decimal("12.50")
        assert dune_draft.category == "SciFi"
        assert dune_draft.author == "Herbert"

    def test_price_from_json_number(self):
        draft = BookDraft.model_validate_json(
            '{"name": "Dune", "price": 12.50, "category": "SciFi", "author": "Herbert"}'
        )
        assert draft.price == Decimal("12.5")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            BookDraft(name="Dune", price=Decimal("-1"), category="SciFi", author="Herbert")

        assert "greater than or equal to 0" in str(exc_info.value)

    @pytest.mark.parametrize("price", [
        Decimal("1.2345678901234567890123456789012345678"),
        Decimal("1E+7000"),
    ])
    def test_price_beyond_decimal128_rejected(self, price):
        with pytest.raises(ValidationError) as exc_info:
            BookDraft(name="Dune", price=price, category="SciFi", author="Herbert")

        assert "price cannot be stored as a 128-bit decimal" in str(exc_info.value)

    def test_34_digit_price_allowed(self):
        price = Decimal("1.234567890123456789012345678901234")
        draft = BookDraft(name="Dune", price=price, category="SciFi", author="Herbert")
        assert draft.price == price

    def test_zero_price_allowed(self):
        draft = BookDraft(name="Free", price=Decimal("0"), category="Misc", author="Anon")
        assert draft.price == Decimal("0")

    def test_name_required(self):
        with pytest.raises(ValidationError):
            BookDraft(price=Decimal("1"), category="SciFi", author="Herbert")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            BookDraft(name="   ", price=Decimal("1"), category="SciFi", author="Herbert")

        assert "name must not be blank" in str(exc_info.value)

    def test_caller_supplied_id_ignored(self):
        draft = BookDraft(
            id="caller-chosen",
            name="Dune",
            price=Decimal("1"),
            category="SciFi",
            author="Herbert"
        )
        assert "id" not in draft.model_dump()


class TestBook:
    """Test cases for Book model."""

    def test_json_renders_price_as_number(self):
        book = Book(id=new_id(), name="Dune", price=Decimal("12.50"), category="SciFi", author="Herbert")

        data = json.loads(book.model_dump_json())
        assert data["price"] == 12.5
        assert data["id"] == book.id

    def test_python_dump_keeps_decimal(self):
        book = Book(id="abc", name="Dune", price=Decimal("12.50"), category="SciFi", author="Herbert")
        assert book.model_dump()["price"] == Decimal("12.50")


class TestBookPatch:
    """Test cases for BookPatch model."""

    def test_changes_only_include_supplied_fields(self):
        patch = BookPatch(price=Decimal("9.99"))
        assert patch.changes() == {"price": Decimal("9.99")}

    def test_null_fields_are_not_changes(self):
        patch = BookPatch.model_validate({"name": "Dune Messiah", "category": None})
        assert patch.changes() == {"name": "Dune Messiah"}

    def test_id_cannot_be_patched(self):
        patch = BookPatch.model_validate({"id": "other", "author": "Frank Herbert"})
        assert patch.changes() == {"author": "Frank Herbert"}

    def test_empty_patch(self):
        assert BookPatch().changes() == {}

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            BookPatch(price=Decimal("-0.01"))

    @pytest.mark.parametrize("price", [
        Decimal("1.2345678901234567890123456789012345678"),
        Decimal("1E+7000"),
    ])
    def test_price_beyond_decimal128_rejected(self, price):
        with pytest.raises(ValidationError) as exc_info:
            BookPatch(price=price)

        assert "price cannot be stored as a 128-bit decimal" in str(exc_info.value)
