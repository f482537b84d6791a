from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from slugify import slugify
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.schemas.product_schemas import CategoryCreate, ProductCreate, ProductUpdate

router = APIRouter()


def unique_slug(session: Session, model, name: str) -> str:
    base = slugify(name) or "item"
    slug = base
    counter = 2
    while session.exec(select(model).where(model.slug == slug)).first():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


@router.post("/products")
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    if data.category_id and not session.get(Category, data.category_id):
        raise HTTPException(404, "Category not found")

    product = Product(**data.model_dump(), slug=unique_slug(session, Product, data.name))

    session.add(product)
    session.commit()
    session.refresh(product)

    return {"message": "Product created", "product": product}


@router.put("/products/{product_id}")
def update_product(
    product_id: int,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    updates = data.model_dump(exclude_unset=True)

    if updates.get("category_id") and not session.get(Category, updates["category_id"]):
        raise HTTPException(404, "Category not found")

    for field, value in updates.items():
        setattr(product, field, value)

    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    session.refresh(product)

    return {"message": "Product updated", "product": product}


@router.post("/categories")
def create_category(
    data: CategoryCreate,
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    if session.exec(select(Category).where(Category.name == data.name)).first():
        raise HTTPException(400, "Category already exists")

    category = Category(
        name=data.name,
        slug=unique_slug(session, Category, data.name),
        description=data.description,
    )
    session.add(category)
    session.commit()
    session.refresh(category)

    return {"message": "Category created", "category": category}
