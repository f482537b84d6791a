"""
Product suggestions for the product page and the cart.

Cart suggestions score every in-stock product against what's already in the
cart: same category, complementary category keywords, featured and newly
added items. Featured products fill any remaining slots.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set

from sqlmodel import Session, select

from storefront.models.product import Product

logger = logging.getLogger(__name__)

# category keyword -> keywords of categories that go well with it
COMPLEMENTARY_ITEMS = {
    "millet": ["health powder", "tea", "snacks", "health mix"],
    "millets": ["health powder", "tea", "snacks", "health mix"],
    "tea": ["snacks", "millet", "health powder", "biscuits"],
    "health powder": ["millet", "tea", "health mix"],
    "health mix": ["millet", "tea", "health powder"],
    "snacks": ["tea", "juice", "drinks"],
    "biscuits": ["tea", "coffee"],
    "spices": ["millet", "rice", "dals"],
    "masala": ["millet", "rice", "dals"],
}

SAME_CATEGORY_SCORE = 10
COMPLEMENTARY_SCORE = 15
FEATURED_SCORE = 5
NEW_PRODUCT_SCORE = 2
NEW_PRODUCT_AGE = timedelta(days=30)
CANDIDATE_POOL = 50


def _in_stock():
    return select(Product).where(
        Product.is_available == True,  # noqa: E712
        Product.stock > 0,
    )


def related_products(session: Session, product: Product, limit: int = 4) -> List[Product]:
    """Same-category products when there are at least two, else the newest, featured first."""
    query = _in_stock().where(Product.id != product.id)

    if product.category_id:
        same_category = session.exec(
            query.where(Product.category_id == product.category_id)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        ).all()
        if len(same_category) >= 2:
            return list(same_category)

    return list(session.exec(
        query.order_by(
            Product.is_featured.desc(), Product.created_at.desc(), Product.id.desc()
        ).limit(limit)
    ).all())


def complementary_keywords(category_names: Iterable[str]) -> Set[str]:
    keywords = set()
    for name in category_names:
        for key, pairs in COMPLEMENTARY_ITEMS.items():
            if key in name or name in key:
                keywords.update(pairs)
    return keywords


def score_product(
    product: Product,
    cart_category_ids: Set[int],
    keywords: Set[str],
    now: datetime,
) -> int:
    score = 0
    if product.category_id and product.category_id in cart_category_ids:
        score += SAME_CATEGORY_SCORE

    category_name = product.category.name.lower() if product.category else ""
    name = product.name.lower()
    for keyword in keywords:
        if keyword in category_name or keyword in name:
            score += COMPLEMENTARY_SCORE

    if product.is_featured:
        score += FEATURED_SCORE
    if now - product.created_at < NEW_PRODUCT_AGE:
        score += NEW_PRODUCT_SCORE
    return score


def recommend_for_cart(
    session: Session,
    cart_products: List[Product],
    limit: int = 6,
    now: Optional[datetime] = None,
) -> List[Product]:
    if not cart_products:
        return list(session.exec(
            _in_stock().where(Product.is_featured == True)  # noqa: E712
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        ).all())

    now = now or datetime.utcnow()
    cart_ids = {p.id for p in cart_products}
    cart_category_ids = {p.category_id for p in cart_products if p.category_id}
    keywords = complementary_keywords(
        p.category.name.lower() for p in cart_products if p.category
    )

    candidates = session.exec(
        _in_stock().where(Product.id.not_in(cart_ids))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(CANDIDATE_POOL)
    ).all()

    scored = [(score_product(p, cart_category_ids, keywords, now), p) for p in candidates]
    picks = [p for score, p in sorted(scored, key=lambda s: -s[0]) if score > 0][:limit]

    if len(picks) < limit:
        picked = {p.id for p in picks}
        picks.extend(
            [p for p in candidates if p.is_featured and p.id not in picked][: limit - len(picks)]
        )

    logger.debug(f"Recommended {len(picks)} products for a cart of {len(cart_products)}")
    return picks
