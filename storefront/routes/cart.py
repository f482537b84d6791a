from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.routes.products import serialize_product
from storefront.schemas.cart_schemas import CartAddRequest, CartUpdateRequest
from storefront.services.recommendation_service import recommend_for_cart
from storefront.utils.money import ZERO, round_money
from storefront.utils.token import get_current_user


router = APIRouter()

# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    product = session.get(Product, data.product_id)
    if not product or not product.is_available:
        raise HTTPException(status_code=404, detail="Product not found")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == current_user.id,
            CartItem.product_id == data.product_id
        )
    ).first()

    quantity = data.quantity + (existing_item.quantity if existing_item else 0)
    if quantity > product.stock:
        raise HTTPException(400, f"Only {product.stock} left in stock")

    if existing_item:
        existing_item.quantity = quantity
        session.add(existing_item)
        session.commit()
        session.refresh(existing_item)
        return {"message": "Cart updated", "item": existing_item}

    new_item = CartItem(
        user_id=current_user.id,
        product_id=product.id,
        quantity=data.quantity,
    )

    session.add(new_item)
    session.commit()
    session.refresh(new_item)

    return {"message": "Added to cart", "item": new_item}


# View Cart

@router.get("")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    rows = session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == current_user.id)
        .order_by(CartItem.id)
    ).all()

    items_response = []
    cart_value = ZERO

    for cart_item, product in rows:
        line_total = round_money(product.price * cart_item.quantity)
        cart_value += line_total

        items_response.append({
            "item_id": cart_item.id,
            "product_id": product.id,
            "name": product.name,
            "slug": product.slug,
            "image_url": product.image_url,
            "price": product.price,
            "compare_price": product.compare_price,
            "quantity": cart_item.quantity,
            "stock": product.stock,
            "in_stock": product.in_stock,
            "gst_percentage": product.gst_percentage,
            "tax_inclusive": product.tax_inclusive,
            "total": line_total,
        })

    return {
        "items": items_response,
        "item_count": sum(i["quantity"] for i in items_response),
        "cart_value": round_money(cart_value),
    }

# Update Cart
@router.put("/update/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = session.get(CartItem, item_id)

    if not item or item.user_id != current_user.id:
        raise HTTPException(404, "Cart item not found")

    if data.quantity <= 0:
        session.delete(item)
        session.commit()
        return {"message": "Item removed"}

    product = session.get(Product, item.product_id)
    if product and data.quantity > product.stock:
        raise HTTPException(400, f"Only {product.stock} left in stock")

    item.quantity = data.quantity
    session.add(item)
    session.commit()
    session.refresh(item)

    return {"message": "Quantity updated", "item": item}

# Remove Cart

@router.delete("/remove/{item_id}")
def remove_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = session.get(CartItem, item_id)

    if not item or item.user_id != current_user.id:
        raise HTTPException(404, "Item not found")

    session.delete(item)
    session.commit()

    return {"message": "Item removed from cart"}

# Clear Cart
def clear_cart(session: Session, user_id: int):
    items = session.exec(
        select(CartItem).where(CartItem.user_id == user_id)
    ).all()

    for item in items:
        session.delete(item)

    session.commit()


@router.delete("/clear")
def clear_cart_endpoint(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    clear_cart(session, current_user.id)
    return {"message": "Cart cleared"}


# Recommendations

@router.get("/recommendations")
def get_recommendations(
    limit: int = Query(6, ge=1, le=12),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_products = session.exec(
        select(Product)
        .join(CartItem, CartItem.product_id == Product.id)
        .where(CartItem.user_id == current_user.id)
    ).all()

    return [serialize_product(p) for p in recommend_for_cart(session, list(cart_products), limit)]
