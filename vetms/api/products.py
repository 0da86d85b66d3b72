# vetms/api/products.py

from typing import List, Optional

from fastapi import APIRouter, Query, Response

from vetms.models.products import PriceListImportOut, PriceListIn, ProductIn, ProductOut
from vetms.services import catalog

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
def list_products(
    query: Optional[str] = Query(default=None, description="Substring match on the name"),
) -> List[ProductOut]:
    return [ProductOut(**row) for row in catalog.search_products(query)]


@router.post("", response_model=ProductOut)
def upsert_product(payload: ProductIn, response: Response) -> ProductOut:
    """
    Create a product, or update the price of the product with the same name.
    """
    row, created = catalog.upsert_product(payload.name, payload.price)
    response.status_code = 201 if created else 200
    return ProductOut(**row)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn) -> ProductOut:
    return ProductOut(**catalog.update_product(product_id, payload.name, payload.price))


@router.delete("/{product_id}")
def delete_product(product_id: int) -> dict:
    catalog.delete_product(product_id)
    return {"ok": True}


@router.post("/import-csv", response_model=PriceListImportOut)
def import_price_list(payload: PriceListIn) -> PriceListImportOut:
    return PriceListImportOut(**catalog.import_price_list(payload.csv))
