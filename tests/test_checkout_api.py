from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import select

from storefront.models.cart import CartItem
from storefront.models.coupon import Coupon
from storefront.models.order import Order
from storefront.models.product import Product

ADDRESS = {
    "full_name": "Asha Raman",
    "phone": "+91 98765 43210",
    "address_line1": "12 Temple Street",
    "city": "Chennai",
    "state": "Tamil Nadu",
    "pincode": "600001",
    "is_default": True,
}


@pytest.fixture()
def products(make_product):
    ghee = make_product("Ghee", 200, gst=5, inclusive=True, stock=10, hsn_code="04059020")
    soap = make_product("Neem Soap", 100, gst=18, inclusive=False, stock=5)
    return ghee, soap


@pytest.fixture()
def filled_cart(client: TestClient, customer_headers, products):
    ghee, soap = products
    for product, quantity in ((ghee, 2), (soap, 1)):
        response = client.post(
            "/cart/add",
            json={"product_id": product.id, "quantity": quantity},
            headers=customer_headers,
        )
        assert response.status_code == 200
    return products


def save_address(client, headers, **overrides) -> int:
    response = client.post("/checkout/address", json={**ADDRESS, **overrides}, headers=headers)
    assert response.status_code == 200
    return response.json()["address_id"]


def test_checkout_requires_login(client):
    assert client.post("/checkout/summary", json={"address_id": 1}).status_code == 401


def test_address_phone_is_normalized(client, customer_headers):
    save_address(client, customer_headers)

    addresses = client.get("/checkout/addresses", headers=customer_headers).json()
    assert addresses[0]["phone"] == "9876543210"
    assert addresses[0]["is_default"] is True


def test_address_with_bad_pincode_is_rejected(client, customer_headers):
    response = client.post(
        "/checkout/address", json={**ADDRESS, "pincode": "12345"}, headers=customer_headers
    )
    assert response.status_code == 422


def test_cart_cannot_exceed_stock(client, customer_headers, products):
    ghee, _ = products
    response = client.post(
        "/cart/add", json={"product_id": ghee.id, "quantity": 11}, headers=customer_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only 10 left in stock"


def test_cart_view_totals(client, customer_headers, filled_cart):
    cart = client.get("/cart", headers=customer_headers).json()

    assert cart["item_count"] == 3
    assert cart["cart_value"] == 500.0


def test_local_summary_splits_cgst_and_sgst(client, customer_headers, shipping_regions, filled_cart):
    address_id = save_address(client, customer_headers)

    response = client.post("/checkout/summary", json={"address_id": address_id}, headers=customer_headers)

    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["gst_type"] == "CGST+SGST"
    assert summary["subtotal"] == 480.95
    assert summary["item_gst"] == 37.05
    assert summary["shipping_charge"] == 0.0
    assert summary["tax_split"] == {"cgst": 18.53, "sgst": 18.52}
    assert summary["total"] == 518.0
    assert summary["items"][0]["hsn_code"] == "04059020"


def test_cross_state_summary_charges_igst_and_shipping(client, customer_headers, shipping_regions, filled_cart):
    address_id = save_address(client, customer_headers, state="Karnataka", city="Bengaluru", pincode="560001")

    summary = client.post(
        "/checkout/summary", json={"address_id": address_id}, headers=customer_headers
    ).json()["summary"]

    assert summary["gst_type"] == "IGST"
    assert summary["shipping_charge"] == 80.0
    assert summary["shipping_gst"] == 4.0
    assert summary["tax_split"] == {"igst": 41.05}
    assert summary["total"] == 602.0


def test_linked_territory_is_taxed_locally(client, customer_headers, shipping_regions, filled_cart):
    address_id = save_address(client, customer_headers, state="Puducherry", city="Puducherry", pincode="605001")

    summary = client.post(
        "/checkout/summary", json={"address_id": address_id}, headers=customer_headers
    ).json()["summary"]

    assert summary["gst_type"] == "CGST+SGST"


def test_summary_without_shipping_configuration_is_rejected(client, customer_headers, filled_cart):
    address_id = save_address(client, customer_headers)

    response = client.post("/checkout/summary", json={"address_id": address_id}, headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Delivery is not available for Tamil Nadu"


def test_summary_with_empty_cart_is_rejected(client, customer_headers, shipping_regions):
    address_id = save_address(client, customer_headers)

    response = client.post("/checkout/summary", json={"address_id": address_id}, headers=customer_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Your cart is empty."


def test_apply_coupon(client, customer_headers, shipping_regions, filled_cart, make_coupon):
    make_coupon("SAVE10", value=10, min_order=500)
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/apply-coupon",
        json={"address_id": address_id, "code": "save10"},
        headers=customer_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["discount"] == 51.8
    assert body["message"] == "Coupon applied! You save Rs. 51.80"
    assert body["summary"]["total"] == 466.2
    assert body["summary"]["coupon_code"] == "SAVE10"


def test_apply_coupon_below_minimum_is_an_error(client, customer_headers, shipping_regions, filled_cart, make_coupon):
    make_coupon("BIG600", value=10, min_order=600)
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/apply-coupon",
        json={"address_id": address_id, "code": "BIG600"},
        headers=customer_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Minimum order Rs. 600.00 required for this coupon"


def test_coupon_expiry_given_in_ist_is_honoured(client, admin_headers, customer_headers, shipping_regions, filled_cart):
    ist = timezone(timedelta(hours=5, minutes=30))
    expired = datetime.now(ist) - timedelta(hours=1)
    created = client.post(
        "/admin/coupons",
        json={"code": "TZ10", "discount_value": "10", "expires_at": expired.isoformat()},
        headers=admin_headers,
    )
    assert created.status_code == 200
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/apply-coupon",
        json={"address_id": address_id, "code": "TZ10"},
        headers=customer_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "This coupon has expired"


def test_rejected_coupon_does_not_block_the_summary(client, customer_headers, shipping_regions, filled_cart):
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/summary",
        json={"address_id": address_id, "coupon_code": "GHOST"},
        headers=customer_headers,
    )

    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["discount"] == 0.0
    assert summary["coupon_code"] is None
    assert summary["coupon_message"] == "Invalid coupon"
    assert summary["total"] == 518.0


def test_place_order_end_to_end(client, session, customer_headers, shipping_regions, filled_cart, make_coupon):
    ghee, soap = filled_cart
    coupon = make_coupon("SAVE10", value=10, min_order=500)
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/place-order",
        json={"address_id": address_id, "coupon_code": "SAVE10", "payment_method": "cod"},
        headers=customer_headers,
    )

    assert response.status_code == 200
    placed = response.json()
    assert placed["total"] == 466.2
    assert placed["status"] == "pending"
    assert placed["order_number"].startswith("ORD")
    order_id = placed["order_id"]

    assert session.get(Product, ghee.id).stock == 8
    assert session.get(Product, soap.id).stock == 4
    assert session.get(Coupon, coupon.id).used_count == 1
    assert session.exec(select(CartItem)).all() == []

    detail = client.get(f"/orders/{order_id}", headers=customer_headers).json()
    assert len(detail["items"]) == 2
    assert detail["delivery_address"]["state"] == "Tamil Nadu"
    assert detail["summary"]["discount"] == 51.8
    assert detail["summary"]["tax_split"] == {"cgst": 18.53, "sgst": 18.52}
    assert detail["summary"]["average_gst_percentage"] == 7.7

    orders = client.get("/orders", headers=customer_headers).json()
    assert [o["order_id"] for o in orders] == [order_id]

    track = client.get(f"/orders/{order_id}/track", headers=customer_headers).json()
    assert [e["event"] for e in track["timeline"]] == ["order_placed"]

    invoice = client.get(f"/orders/{order_id}/invoice", headers=customer_headers).json()
    assert invoice["invoice_number"].startswith("INV")
    assert invoice["cgst_amount"] == 18.53
    assert invoice["total"] == 466.2

    pdf = client.get(f"/orders/{order_id}/invoice/download", headers=customer_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_cancel_puts_stock_back(client, session, customer_headers, shipping_regions, filled_cart):
    ghee, _ = filled_cart
    address_id = save_address(client, customer_headers)
    order_id = client.post(
        "/checkout/place-order", json={"address_id": address_id}, headers=customer_headers
    ).json()["order_id"]
    assert session.get(Product, ghee.id).stock == 8

    response = client.post(f"/orders/{order_id}/cancel", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert session.get(Product, ghee.id).stock == 10

    again = client.post(f"/orders/{order_id}/cancel", headers=customer_headers)
    assert again.status_code == 400


def test_cancel_gives_the_coupon_use_back(client, session, customer_headers, shipping_regions, filled_cart, make_coupon):
    coupon = make_coupon("ONCE", value=10, max_uses=1)
    address_id = save_address(client, customer_headers)
    order_id = client.post(
        "/checkout/place-order",
        json={"address_id": address_id, "coupon_code": "ONCE"},
        headers=customer_headers,
    ).json()["order_id"]
    assert session.get(Coupon, coupon.id).used_count == 1

    response = client.post(f"/orders/{order_id}/cancel", headers=customer_headers)

    assert response.status_code == 200
    assert session.get(Coupon, coupon.id).used_count == 0

    ghee, soap = filled_cart
    client.post("/cart/add", json={"product_id": ghee.id, "quantity": 2}, headers=customer_headers)
    client.post("/cart/add", json={"product_id": soap.id}, headers=customer_headers)
    reapplied = client.post(
        "/checkout/apply-coupon",
        json={"address_id": address_id, "code": "ONCE"},
        headers=customer_headers,
    )
    assert reapplied.status_code == 200


def test_place_order_with_too_little_stock_changes_nothing(client, session, customer_headers, shipping_regions, filled_cart):
    ghee, soap = filled_cart
    ghee.stock = 1
    session.add(ghee)
    session.commit()
    address_id = save_address(client, customer_headers)

    response = client.post(
        "/checkout/place-order", json={"address_id": address_id}, headers=customer_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient stock for Ghee. Available: 1, Requested: 2"
    assert session.exec(select(Order)).all() == []
    assert session.get(Product, soap.id).stock == 5
    assert len(session.exec(select(CartItem)).all()) == 2


def test_other_users_orders_are_hidden(client, customer_headers, admin_headers, shipping_regions, filled_cart):
    address_id = save_address(client, customer_headers)
    order_id = client.post(
        "/checkout/place-order", json={"address_id": address_id}, headers=customer_headers
    ).json()["order_id"]

    assert client.get(f"/orders/{order_id}", headers=admin_headers).status_code == 404


def test_prices_are_frozen_on_the_order(client, session, customer_headers, shipping_regions, filled_cart):
    ghee, _ = filled_cart
    address_id = save_address(client, customer_headers)
    order_id = client.post(
        "/checkout/place-order", json={"address_id": address_id}, headers=customer_headers
    ).json()["order_id"]

    ghee.price = Decimal("999.00")
    session.add(ghee)
    session.commit()

    detail = client.get(f"/orders/{order_id}", headers=customer_headers).json()
    assert detail["summary"]["total"] == 518.0
