from collections import Counter
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from storefront.database import get_session
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.user import User
from storefront.schemas.review_schemas import ReviewCreate, ReviewUpdate
from storefront.utils.token import get_current_user

router = APIRouter()


def _product_by_slug(session: Session, slug: str) -> Product:
    product = session.exec(select(Product).where(Product.slug == slug)).first()
    if not product:
        raise HTTPException(404, "Product not found")
    return product


def review_summary(reviews) -> dict:
    counts = Counter(r.rating for r in reviews)
    total = len(reviews)
    average = round(sum(r.rating for r in reviews) / total, 1) if total else 0.0
    return {
        "average_rating": average,
        "total_reviews": total,
        "breakdown": {stars: counts.get(stars, 0) for stars in range(5, 0, -1)},
    }


@router.post("/products/{slug}")
def create_review(
    slug: str,
    data: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    product = _product_by_slug(session, slug)

    existing = session.exec(
        select(Review).where(
            Review.product_id == product.id,
            Review.user_id == current_user.id,
        )
    ).first()
    if existing:
        raise HTTPException(400, "You have already reviewed this product")

    review = Review(
        product_id=product.id,
        user_id=current_user.id,
        user_name=f"{current_user.first_name} {current_user.last_name}".strip(),
        rating=data.rating,
        comment=data.comment,
    )

    session.add(review)
    session.commit()
    session.refresh(review)

    return {"message": "Review added", "review": review}


@router.get("/products/{slug}")
def list_reviews(slug: str, session: Session = Depends(get_session)):
    product = _product_by_slug(session, slug)

    reviews = session.exec(
        select(Review)
        .where(Review.product_id == product.id)
        .order_by(Review.created_at.desc())
    ).all()

    return {"summary": review_summary(reviews), "reviews": reviews}


@router.put("/{review_id}")
def update_review(
    review_id: int,
    data: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    review = session.get(Review, review_id)

    if not review or review.user_id != current_user.id:
        raise HTTPException(404, "Review not found")

    if data.rating is not None:
        review.rating = data.rating

    if data.comment is not None:
        review.comment = data.comment

    review.updated_at = datetime.utcnow()

    session.add(review)
    session.commit()
    session.refresh(review)

    return {"message": "Review updated successfully", "review": review}


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    review = session.get(Review, review_id)

    if not review or (review.user_id != current_user.id and current_user.role != "admin"):
        raise HTTPException(404, "Review not found")

    session.delete(review)
    session.commit()

    return {"message": "Review deleted"}
