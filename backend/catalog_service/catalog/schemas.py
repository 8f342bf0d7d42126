# backend/catalog_service/catalog/schemas.py

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Numeric(10, 2) upper bound
MAX_PRICE = Decimal("99999999.99")


def parse_price(value: Union[str, float, int, Decimal, None]) -> Optional[Decimal]:
    """
    Parses a price given as a JSON number or a numeric string.
    Returns None for a missing/empty value; raises ValueError for anything
    that is not a finite, non-negative number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Price must be a number")
    text = str(value).strip()
    if not text:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Price '{text}' is not a valid number")
    if not price.is_finite():
        raise ValueError("Price must be a finite number")
    if price < 0:
        raise ValueError("Price must not be negative")
    return price


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ProductWrite(BaseModel):
    """Fields accepted when creating or updating a product; every one is optional on the wire."""

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, le=MAX_PRICE)
    image: Optional[str] = Field(
        None,
        max_length=2048,
        description="URL of an externally hosted product image.",
    )

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        return parse_price(value)


class ProductCreate(ProductWrite):
    def missing_required(self) -> bool:
        return is_blank(self.name) or is_blank(self.description) or self.price is None


class ProductUpdate(ProductWrite):
    def changes(self) -> dict:
        """
        Returns the column values this update should apply.
        Blank name/description and a missing or zero price mean "leave unchanged";
        image is applied whenever the key was sent, so null or "" clears it.
        """
        data = {}
        if not is_blank(self.name):
            data["name"] = self.name
        if not is_blank(self.description):
            data["description"] = self.description
        if self.price:
            data["price"] = self.price
        if "image" in self.model_fields_set:
            data["image"] = self.image or None
        return data


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class DeleteResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
