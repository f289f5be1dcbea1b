# product_api/routers/product.py
from __future__ import annotations

import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from product_api.crud import product as crud
from product_api.database import get_db
from product_api.responses import success_envelope
from product_api.schemas.product import ErrorEnvelope, ProductPayload, ProductRead, ResultEnvelope

router = APIRouter(tags=["products"])

# id-ul din path e limitat la cifre de convertorul `int`; peste int64 → 400
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

DEFAULT_COUNT = 10
MAX_COUNT = 10

_INT_RE = re.compile(r"[+-]?[0-9]+")

_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorEnvelope},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorEnvelope},
}


# -------------------------- Parsing / clamping --------------------------

def parse_int(raw: Optional[str]) -> int:
    """Întreg zecimal cu semn opțional; invalid → 0, în afara int64 → saturat."""
    if raw is None or not _INT_RE.fullmatch(raw):
        return 0
    return max(INT64_MIN, min(int(raw), INT64_MAX))


def clamp_count(raw: Optional[str]) -> int:
    count = parse_int(raw)
    if count < 1 or count > MAX_COUNT:
        return DEFAULT_COUNT
    return count


def clamp_start(raw: Optional[str]) -> int:
    return max(parse_int(raw), 0)


def valid_product_id(product_id: int) -> int:
    if product_id > INT64_MAX:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid product ID")
    return product_id


def _storage_failure(e: crud.StorageError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


async def product_payload(request: Request) -> ProductPayload:
    """Body-ul e decodat ca JSON indiferent de Content-Type; shape mismatch → 400."""
    try:
        return ProductPayload.model_validate_json(await request.body())
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))


# -------------------------- /products --------------------------

@router.get(
    "/products",
    response_model=List[ProductRead],
    summary="List products (limit/offset)",
    responses=_ERRORS,
)
def list_products(
    count: Optional[str] = Query(default=None, description="Max rows, 1..10 (altfel 10)"),
    start: Optional[str] = Query(default=None, description="Offset, >= 0"),
    db: Session = Depends(get_db),
):
    try:
        return crud.list_products(db, start=clamp_start(start), count=clamp_count(count))
    except crud.StorageError as e:
        raise _storage_failure(e)


@router.get(
    "/products/name",
    response_model=List[ProductRead],
    summary="Find products whose name contains a substring (case-sensitive)",
    responses=_ERRORS,
)
def find_products_by_name(
    name: str = Query(default="", description="Substring căutat în `name`"),
    db: Session = Depends(get_db),
):
    try:
        return crud.find_by_name(db, name)
    except crud.StorageError as e:
        raise _storage_failure(e)


# -------------------------- /product --------------------------

@router.post(
    "/product",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    responses=_ERRORS,
)
def create_product(payload: ProductPayload = Depends(product_payload), db: Session = Depends(get_db)):
    try:
        return crud.create(db, payload.name, payload.price)
    except crud.StorageError as e:
        raise _storage_failure(e)


@router.delete(
    "/product/name",
    response_model=ResultEnvelope,
    summary="Delete products whose name contains a substring",
    responses=_ERRORS,
)
def delete_products_by_name(
    name: str = Query(default="", description="Substring căutat în `name`"),
    db: Session = Depends(get_db),
):
    try:
        crud.delete_by_name(db, name)
    except crud.StorageError as e:
        raise _storage_failure(e)
    return success_envelope()


@router.get(
    "/product/total",
    response_model=float,
    summary="Sum of all product prices",
    responses=_ERRORS,
)
def get_products_total_price(db: Session = Depends(get_db)):
    try:
        total = crud.sum_price(db)
    except crud.StorageError as e:
        raise _storage_failure(e)
    return float(total)


@router.get(
    "/product/{product_id:int}",
    response_model=ProductRead,
    summary="Get a product by id",
    responses={**_ERRORS, status.HTTP_404_NOT_FOUND: {"model": ErrorEnvelope}},
)
def get_product(product_id: int = Depends(valid_product_id), db: Session = Depends(get_db)):
    result = crud.get_by_id(db, product_id)
    if isinstance(result, crud.NotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if isinstance(result, crud.Failed):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.detail)
    return result.product


@router.put(
    "/product/{product_id:int}",
    response_model=ProductRead,
    summary="Update a product (id din path are prioritate)",
    responses=_ERRORS,
)
def update_product(
    product_id: int = Depends(valid_product_id),
    payload: ProductPayload = Depends(product_payload),
    db: Session = Depends(get_db),
):
    try:
        return crud.update(db, product_id, payload.name, payload.price)
    except crud.StorageError as e:
        raise _storage_failure(e)


@router.delete(
    "/product/{product_id:int}",
    response_model=ResultEnvelope,
    summary="Delete a product",
    responses=_ERRORS,
)
def delete_product(product_id: int = Depends(valid_product_id), db: Session = Depends(get_db)):
    try:
        crud.delete_by_id(db, product_id)
    except crud.StorageError as e:
        raise _storage_failure(e)
    return success_envelope()
