# vetms/models/products.py

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from vetms.models.common import Amount, check_storable


class ProductIn(BaseModel):
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)

    @field_validator("price")
    @classmethod
    def _storable(cls, value: Decimal) -> Decimal:
        return check_storable(value)


class ProductOut(BaseModel):
    id: int
    name: str
    price: Amount


class PriceListIn(BaseModel):
    csv: str


class PriceListImportOut(BaseModel):
    ok: bool = True
    processed: int
    skipped: int
