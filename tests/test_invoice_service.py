import re
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.services import invoice_service
from storefront.services.pricing_service import StoreTaxProfile

D = Decimal

PROFILE = StoreTaxProfile(
    business_name="Kaveri Naturals",
    business_address="4 Mill Road\nCoimbatore",
    state="Tamil Nadu",
    gst_number="33AABCU9603R1ZM",
    gst_enabled=True,
    supported_rates=(0, 5, 12, 18),
)


def local_order() -> Order:
    return Order(
        id=7,
        order_number="ORD2026030100042",
        user_id=1,
        delivery_address={
            "full_name": "Asha Raman",
            "address_line1": "12 Temple Street",
            "city": "Chennai",
            "state": "Tamil Nadu",
            "pincode": "600001",
        },
        delivery_state="Tamil Nadu",
        subtotal=D("480.95"),
        item_gst=D("37.05"),
        shipping_charge=D("0.00"),
        shipping_gst=D("0.00"),
        cgst_amount=D("18.53"),
        sgst_amount=D("18.52"),
        total_gst=D("37.05"),
        discount=D("51.80"),
        total=D("466.20"),
        gst_type="CGST+SGST",
        payment_method="cod",
        created_at=datetime(2026, 3, 1, 10, 30),
    )


def order_items():
    return [
        OrderItem(
            order_id=7, product_id=1, product_name="Ghee 500ml", hsn_code="04059020",
            unit_price=D("200.00"), quantity=2, gst_percentage=5,
            base_amount=D("380.95"), gst_amount=D("19.05"), line_total=D("400.00"),
        ),
        OrderItem(
            order_id=7, product_id=2, product_name="Neem Soap", hsn_code=None,
            unit_price=D("100.00"), quantity=1, gst_percentage=18, tax_inclusive=False,
            base_amount=D("100.00"), gst_amount=D("18.00"), line_total=D("118.00"),
        ),
    ]


def test_invoice_number_format():
    number = invoice_service.generate_invoice_number(datetime(2026, 3, 1))
    assert re.fullmatch(r"INV20260301\d{5}", number)


def test_invoice_record_copies_order_totals():
    invoice = invoice_service.build_invoice_record(local_order(), PROFILE)

    assert invoice.order_id == 7
    assert invoice.invoice_number.startswith("INV20260301")
    assert invoice.gst_number == "33AABCU9603R1ZM"
    assert invoice.customer_name == "Asha Raman"
    assert invoice.customer_address == "12 Temple Street\nChennai, Tamil Nadu\n600001"
    assert invoice.total_tax == D("37.05")
    assert invoice.total_amount == D("466.20")


def test_gstin_is_left_off_when_gst_is_disabled():
    profile = replace(PROFILE, gst_enabled=False)
    assert invoice_service.build_invoice_record(local_order(), profile).gst_number is None


def test_invoice_data_shows_the_split_for_the_jurisdiction():
    order = local_order()
    invoice = invoice_service.build_invoice_record(order, PROFILE)

    data = invoice_service.build_invoice_data(invoice, order, order_items())

    assert data["cgst_amount"] == D("18.53")
    assert data["sgst_amount"] == D("18.52")
    assert "igst_amount" not in data
    assert [i["gst_percentage"] for i in data["items"]] == [5, 18]
    assert data["items"][1]["hsn_code"] == "-"


def test_pdf_is_rendered_once_and_then_served_from_disk():
    order = local_order()
    invoice = invoice_service.build_invoice_record(order, PROFILE)

    assert not invoice_service.invoice_exists(order.id)
    pdf = invoice_service.get_invoice_pdf(invoice, order, order_items())

    assert pdf.startswith(b"%PDF")
    assert invoice_service.invoice_exists(order.id)
    assert invoice_service.load_invoice_pdf(order.id) == pdf


def test_missing_pdf_loads_as_none():
    assert invoice_service.load_invoice_pdf(999) is None


def test_inclusive_price_note_needs_every_line_inclusive():
    order = local_order()
    invoice = invoice_service.build_invoice_record(order, PROFILE)
    items = order_items()

    mixed = invoice_service.build_invoice_data(invoice, order, items)
    assert mixed["prices_include_tax"] is False
    assert invoice_service.render_invoice_pdf(mixed).startswith(b"%PDF")

    inclusive_only = invoice_service.build_invoice_data(invoice, order, items[:1])
    assert inclusive_only["prices_include_tax"] is True
