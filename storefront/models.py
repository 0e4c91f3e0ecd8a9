"""Pydantic models for catalog payloads."""
from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique product identifier")
    name: str
    category: str
    cost: float
    rating: int = Field(..., ge=0, le=5)
    image: str


class ErrorPayload(BaseModel):
    success: bool = False
    message: str


_PRODUCT_LIST = TypeAdapter(List[Product])


def parse_products(payload: Any) -> list[Product]:
    """Validate a decoded JSON array into products.

    Raises ``pydantic.ValidationError`` when the payload is not a list of
    product records.
    """
    return _PRODUCT_LIST.validate_python(payload)
