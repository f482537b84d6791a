from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select, or_
from storefront.database import get_session
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.services.recommendation_service import related_products
from storefront.utils.discounts import pricing_info
from storefront.utils.formatters import format_price_with_gst, gst_rate_description
from storefront.utils.pagination import paginate

router = APIRouter()


def serialize_product(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "image_url": product.image_url,
        "unit": product.unit,
        "weight": product.weight,
        "price": product.price,
        "compare_price": product.compare_price,
        "pricing": pricing_info(product.price, product.compare_price),
        "in_stock": product.in_stock,
        "is_featured": product.is_featured,
        "gst_percentage": product.gst_percentage,
        "tax_inclusive": product.tax_inclusive,
        "category_id": product.category_id,
    }


@router.get("")
def list_products(
    page: int = 1,
    limit: int = 12,
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    session: Session = Depends(get_session),
):
    query = select(Product).where(Product.is_available == True)  # noqa: E712

    if category:
        query = query.join(Category, Product.category_id == Category.id).where(
            Category.slug == category
        )

    if search:
        term = f"%{search.strip()}%"
        query = query.where(
            or_(Product.name.ilike(term), Product.description.ilike(term))
        )

    if featured is not None:
        query = query.where(Product.is_featured == featured)

    query = query.order_by(Product.created_at.desc(), Product.id.desc())

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serializer=serialize_product,
    )


@router.get("/{slug}")
def get_product(slug: str, session: Session = Depends(get_session)):
    product = session.exec(select(Product).where(Product.slug == slug)).first()
    if not product or not product.is_available:
        raise HTTPException(404, "Product not found")

    return {
        **serialize_product(product),
        "description": product.description,
        "stock": product.stock,
        "hsn_code": product.hsn_code,
        "gst_description": gst_rate_description(product.gst_percentage),
        "display_price": format_price_with_gst(
            product.price, "incl. GST" if product.tax_inclusive else "+ GST"
        ),
        "category": product.category.name if product.category else None,
    }


@router.get("/{slug}/related")
def get_related_products(
    slug: str,
    limit: int = Query(4, ge=1, le=12),
    session: Session = Depends(get_session),
):
    product = session.exec(select(Product).where(Product.slug == slug)).first()
    if not product or not product.is_available:
        raise HTTPException(404, "Product not found")

    return [serialize_product(p) for p in related_products(session, product, limit)]
