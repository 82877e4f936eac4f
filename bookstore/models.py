"""
Pydantic models for the Book entity.
Defines the stored shape, the create and update payloads, and id generation.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.decimal128 import Decimal128
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def new_id() -> str:
    """Generate a fresh book id as a 24 character ObjectId hex string."""
    return str(ObjectId())


def _check_storable_price(v: Optional[Decimal]) -> Optional[Decimal]:
    """Prices are stored as Decimal128: at most 34 digits and a bounded exponent."""
    if v is not None:
        try:
            Decimal128(v)
        except (ArithmeticError, ValueError) as e:
            raise ValueError("price cannot be stored as a 128-bit decimal") from e
    return v


class BookDraft(BaseModel):
    """
    Book payload without an id, used as create input.
    An id sent by the caller is ignored; the store assigns one.
    """
    name: str = Field(..., min_length=1, description="Title of the book")
    price: Decimal = Field(..., ge=0, description="Price of the book")
    category: str = Field(..., description="Book category")
    author: str = Field(..., description="Author of the book")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Reject titles made only of whitespace."""
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _check_storable_price(v)

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "Dune",
                "price": 12.50,
                "category": "SciFi",
                "author": "Herbert",
            }
        },
    )


class Book(BookDraft):
    """A persisted book, including its store-assigned id."""
    id: str = Field(..., description="Unique book identifier")

    @field_serializer("price", when_used="json")
    def serialize_price(self, v: Decimal) -> float:
        return float(v)


class BookPatch(BaseModel):
    """
    Partial book payload used as update input.

    Fields left out of the payload, or sent as null, keep their stored
    value. The id can never be changed through a patch.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, description="New title")
    price: Optional[Decimal] = Field(None, ge=0, description="New price")
    category: Optional[str] = Field(None, description="New category")
    author: Optional[str] = Field(None, description="New author")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        return _check_storable_price(v)

    def changes(self) -> Dict[str, Any]:
        """Return only the fields supplied with a non-null value."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
