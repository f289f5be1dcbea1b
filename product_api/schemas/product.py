# product_api/schemas/product.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def quantize_price(v: Decimal) -> Decimal:
    # Aliniază la NUMERIC(10,2) și evită erori de reprezentare
    return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ProductPayload(BaseModel):
    """
    Body pentru create/update. Permisiv: câmpurile lipsă (sau null) iau valori zero,
    cheile necunoscute (inclusiv `id`) sunt ignorate. Fără validări de nume gol / preț negativ.
    """
    name: str = ""
    price: Decimal = Field(Decimal("0.00"), allow_inf_nan=False)

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"examples": [{"name": "test product", "price": 11.22}]},
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name_null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("price", mode="before")
    @classmethod
    def _price_null_as_zero(cls, v: Any) -> Any:
        if v is None:
            return Decimal("0.00")
        # prețul e număr JSON; string/bool = shape mismatch
        if isinstance(v, (str, bool)):
            raise ValueError("price must be a JSON number")
        return v

    @field_validator("price")
    @classmethod
    def _price_quantize(cls, v: Decimal) -> Decimal:
        return quantize_price(v)


class ProductRead(BaseModel):
    """Răspuns pentru produs; `price` iese ca număr JSON, nu string."""
    id: int
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("price")
    def _price_as_number(self, v: Decimal) -> float:
        return float(v)


class ResultEnvelope(BaseModel):
    result: str = "success"


class ErrorEnvelope(BaseModel):
    error: str
