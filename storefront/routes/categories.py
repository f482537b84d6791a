from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.models.category import Category

router = APIRouter()


@router.get("")
def list_categories(session: Session = Depends(get_session)):
    categories = session.exec(select(Category).order_by(Category.name)).all()
    return [
        {"id": c.id, "name": c.name, "slug": c.slug, "description": c.description}
        for c in categories
    ]
