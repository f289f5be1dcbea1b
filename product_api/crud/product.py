# product_api/crud/product.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, List, Union

from sqlalchemy import delete as sa_delete, func, select, update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_api.models.product import Product
from product_api.schemas.product import quantize_price

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Orice eșec de execuție în store (în afară de "no rows" la lookup după ID)."""
    pass


# Rezultatul lookup-ului după ID: Found | NotFound | Failed
@dataclass(frozen=True)
class Found:
    product: Product


@dataclass(frozen=True)
class NotFound:
    product_id: int


@dataclass(frozen=True)
class Failed:
    detail: str


LookupResult = Union[Found, NotFound, Failed]


# -------------------------- Helpers --------------------------

def _describe(exc: SQLAlchemyError) -> str:
    # mesajul driver-ului (fără SQL-ul și link-ul de background din str(exc))
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip()


@contextmanager
def _storage_errors(db: Session, operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Product %s failed: %s", operation, _describe(e))
        raise StorageError(_describe(e)) from e


def _name_contains(pattern: str):
    # substring, case-sensitive; % și _ din pattern sunt literali
    return Product.name.contains(pattern, autoescape=True)


# -------------------------- Reads --------------------------

def get_by_id(db: Session, product_id: int) -> LookupResult:
    """Returnează Found(produs), NotFound(id) sau Failed(detaliu)."""
    try:
        obj = db.execute(select(Product).where(Product.id == product_id)).scalar_one_or_none()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Product get id=%s failed: %s", product_id, _describe(e))
        return Failed(_describe(e))
    if obj is None:
        return NotFound(product_id)
    return Found(obj)


def list_products(db: Session, *, start: int = 0, count: int = 10) -> List[Product]:
    """Produse ordonate după id, sărind `start` rânduri, maxim `count`."""
    stmt = select(Product).order_by(Product.id.asc()).offset(start).limit(count)
    with _storage_errors(db, "list"):
        return list(db.execute(stmt).scalars().all())


def find_by_name(db: Session, pattern: str) -> List[Product]:
    stmt = select(Product).where(_name_contains(pattern)).order_by(Product.id.asc())
    with _storage_errors(db, "find by name"):
        return list(db.execute(stmt).scalars().all())


def sum_price(db: Session) -> Decimal:
    """Suma prețurilor; 0.00 pe tabel gol (COALESCE, fără NULL la agregare)."""
    stmt = select(func.coalesce(func.sum(Product.price), 0))
    with _storage_errors(db, "sum price"):
        total = db.execute(stmt).scalar_one()
    return quantize_price(Decimal(str(total)))


# -------------------------- Mutations --------------------------

def create(db: Session, name: str, price: Decimal) -> Product:
    """Inserează produsul; `id` vine din store."""
    obj = Product(name=name, price=price)
    with _storage_errors(db, "create"):
        db.add(obj)
        db.commit()
        db.refresh(obj)
    logger.debug("Product created: %r", obj)
    return obj


def update(db: Session, product_id: int, name: str, price: Decimal) -> Product:
    """
    UPDATE după id, fără verificare de existență: 0 rânduri afectate nu e eroare.
    Returnează valorile primite cu id-ul din path (obiect detașat).
    """
    stmt = (
        sa_update(Product)
        .where(Product.id == product_id)
        .values(name=name, price=price)
        .execution_options(synchronize_session=False)
    )
    with _storage_errors(db, "update"):
        result = db.execute(stmt)
        db.commit()
    if result.rowcount == 0:
        logger.info("Product update id=%s matched no rows", product_id)
    return Product(id=product_id, name=name, price=price)


def delete_by_id(db: Session, product_id: int) -> None:
    """Șterge produsul după ID; idempotent."""
    stmt = sa_delete(Product).where(Product.id == product_id).execution_options(synchronize_session=False)
    with _storage_errors(db, "delete"):
        db.execute(stmt)
        db.commit()


def delete_by_name(db: Session, pattern: str) -> None:
    """Șterge toate produsele al căror nume conține `pattern`; o singură execuție."""
    stmt = sa_delete(Product).where(_name_contains(pattern)).execution_options(synchronize_session=False)
    with _storage_errors(db, "delete by name"):
        result = db.execute(stmt)
        db.commit()
    logger.info("Deleted %s product(s) matching name=%r", result.rowcount, pattern)
