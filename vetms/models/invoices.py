# vetms/models/invoices.py

import datetime as dt
import math
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from vetms.models.common import Amount, CamelModel, check_storable


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    PAID = "Paid"


# ---- Draft (request body) ----

class InvoiceItemDraft(CamelModel):
    product_id: Optional[int] = Field(default=None, gt=0)
    custom_name: Optional[str] = Field(default=None, min_length=1)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)

    @field_validator("quantity", "unit_price")
    @classmethod
    def _storable(cls, value: Decimal, info) -> Decimal:
        check_storable(value)
        if info.field_name == "quantity" and float(value) <= 0:
            raise ValueError("quantity is too small to store")
        return value

    @model_validator(mode="after")
    def _needs_product_or_name(self) -> "InvoiceItemDraft":
        if self.product_id is None and self.custom_name is None:
            raise ValueError("either productId or customName is required")
        return self

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


class PetGroupDraft(CamelModel):
    pet_name: str = Field(min_length=1)
    pet_species: Optional[str] = None
    items: List[InvoiceItemDraft] = Field(min_length=1)


class InvoiceDraft(CamelModel):
    client_name: str = Field(min_length=1)
    contact_info: Optional[str] = None
    date: Optional[dt.date] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    pets: List[PetGroupDraft] = Field(min_length=1)

    @model_validator(mode="after")
    def _total_in_range(self) -> "InvoiceDraft":
        total = sum((item.line_total for item in self.iter_items()), Decimal("0"))
        if not math.isfinite(float(total)):
            raise ValueError("invoice total is out of range")
        return self

    def iter_items(self):
        for pet in self.pets:
            for item in pet.items:
                yield item


# ---- Write result ----

class InvoiceResult(CamelModel):
    invoice_id: int
    friendly_id: str
    total: Amount
    warnings: List[str] = []


# ---- Reads ----

class InvoiceHeaderOut(BaseModel):
    id: int
    friendly_id: str
    date: dt.date
    status: str
    total_amount: Amount
    client_id: int
    client_name: str
    contact_info: Optional[str] = None


class InvoiceItemOut(BaseModel):
    id: int
    pet_id: Optional[int] = None
    product_id: Optional[int] = None
    product_name_snapshot: str
    quantity: Amount
    price_snapshot: Amount
    pet_name: Optional[str] = None
    pet_species: Optional[str] = None


class InvoiceDetailOut(BaseModel):
    invoice: InvoiceHeaderOut
    items: List[InvoiceItemOut]


class InvoiceSummaryOut(BaseModel):
    id: int
    friendly_id: str
    date: dt.date
    status: str
    total_amount: Amount
    client_name: str
    pet_names: Optional[str] = None
