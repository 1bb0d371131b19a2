"""
Product routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...db.models import Product
from ..dependencies import get_db
from ..errors import ResourceNotFoundError
from ..schemas.common import PaginatedResponse
from ..schemas.product import ProductResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=PaginatedResponse[ProductResponse])
async def list_products(
    vendor_id: Optional[int] = Query(None, alias="vendorId"),
    q: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List products, optionally filtered by vendor, text or category."""
    query = db.query(Product)
    if vendor_id is not None:
        query = query.filter(Product.vendor_id == vendor_id)
    if q and q.strip():
        pattern = f"%{q.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )
    if category:
        query = query.filter(func.lower(Product.category) == category.lower())

    total = query.count()
    products = (
        query.order_by(Product.rating.desc(), Product.name)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse[ProductResponse](
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        limit=limit,
        has_more=(page - 1) * limit + len(products) < total,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: Session = Depends(get_db)) -> ProductResponse:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise ResourceNotFoundError("Product", product_id)
    return ProductResponse.model_validate(product)
