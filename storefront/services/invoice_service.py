"""
GST tax invoices: numbering, the invoice record, and the PDF.

PDFs are drawn with reportlab and kept on disk under settings.invoice_dir so
repeat downloads don't redraw them.
"""
import io
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from storefront.config import settings
from storefront.models.invoice import Invoice
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.services.gst_calculations import JurisdictionMode
from storefront.utils.formatters import format_price

logger = logging.getLogger(__name__)

TAX_NOTE = (
    "Note: The product prices and amounts shown above include all applicable GST. "
    "The tax breakdown is provided for informational and compliance purposes only."
)


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """INV + YYYYMMDD + 5 random digits"""
    now = now or datetime.utcnow()
    return f"INV{now:%Y%m%d}{random.randint(0, 99999):05d}"


def format_address(address: dict) -> str:
    parts = [
        address.get("address_line1"),
        address.get("address_line2"),
        ", ".join(p for p in (address.get("city"), address.get("state")) if p),
        address.get("pincode"),
    ]
    return "\n".join(p for p in parts if p)


def build_invoice_record(order: Order, profile) -> Invoice:
    """Snapshot the order's totals onto a new invoice row (not yet added to a session)."""
    address = order.delivery_address or {}
    return Invoice(
        order_id=order.id,
        invoice_number=generate_invoice_number(order.created_at),
        invoice_date=order.created_at,
        business_name=profile.business_name,
        business_address=profile.business_address,
        gst_number=profile.gst_number if profile.gst_enabled else None,
        customer_name=address.get("full_name", ""),
        customer_address=format_address(address),
        subtotal=order.subtotal,
        cgst_amount=order.cgst_amount,
        sgst_amount=order.sgst_amount,
        igst_amount=order.igst_amount,
        total_tax=order.total_gst,
        gst_type=order.gst_type,
        shipping_charge=order.shipping_charge,
        discount=order.discount,
        total_amount=order.total,
    )


def build_invoice_data(invoice: Invoice, order: Order, items: List[OrderItem]) -> dict:
    data = {
        "invoice_number": invoice.invoice_number,
        "invoice_date": invoice.invoice_date,
        "order_number": order.order_number,
        "payment_method": order.payment_method,
        "business_name": invoice.business_name,
        "business_address": invoice.business_address,
        "gst_number": invoice.gst_number,
        "customer_name": invoice.customer_name,
        "customer_address": invoice.customer_address,
        "items": [
            {
                "description": item.product_name,
                "hsn_code": item.hsn_code or "-",
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "gst_percentage": item.gst_percentage,
                "gst_amount": item.gst_amount,
                "total_amount": item.line_total,
            }
            for item in items
        ],
        "subtotal": invoice.subtotal,
        "shipping_charge": invoice.shipping_charge,
        "discount": invoice.discount,
        "total_tax": invoice.total_tax,
        "gst_type": invoice.gst_type,
        "total": invoice.total_amount,
        "prices_include_tax": all(item.tax_inclusive for item in items),
    }

    if invoice.gst_type == JurisdictionMode.SPLIT_LOCAL.value:
        data["cgst_amount"] = invoice.cgst_amount
        data["sgst_amount"] = invoice.sgst_amount
    else:
        data["igst_amount"] = invoice.igst_amount

    return data


def _tax_summary_lines(data: dict) -> List[tuple]:
    lines = [
        ("Subtotal", format_price(data["subtotal"])),
        ("Shipping", format_price(data["shipping_charge"])),
    ]

    if data["gst_type"] == JurisdictionMode.SPLIT_LOCAL.value:
        if data.get("cgst_amount"):
            lines.append(("CGST (Central GST)", format_price(data["cgst_amount"])))
        if data.get("sgst_amount"):
            lines.append(("SGST (State GST)", format_price(data["sgst_amount"])))
    elif data.get("igst_amount"):
        lines.append(("IGST (Integrated GST)", format_price(data["igst_amount"])))

    if data.get("discount"):
        lines.append(("Discount", f"- {format_price(data['discount'])}"))

    return lines


def render_invoice_pdf(data: dict) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    left, right = 40, width - 40
    y = height - 50

    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(width / 2, y, "TAX INVOICE")
    y -= 28

    # Business
    c.setFont("Helvetica-Bold", 11)
    c.drawString(left, y, data["business_name"])
    y -= 14
    c.setFont("Helvetica", 9)
    for line in (data.get("business_address") or "").splitlines():
        c.drawString(left, y, line)
        y -= 12
    if data.get("gst_number"):
        c.drawString(left, y, f"GSTIN: {data['gst_number']}")
        y -= 12
    y -= 8

    # Invoice details
    c.setFont("Helvetica-Bold", 10)
    c.drawString(left, y, f"Invoice #: {data['invoice_number']}")
    c.drawString(width / 2, y, f"Order #: {data['order_number']}")
    y -= 14
    c.drawString(left, y, f"Date: {data['invoice_date']:%d/%m/%Y}")
    c.drawString(width / 2, y, f"Payment: {data['payment_method'].upper()}")
    y -= 24

    # Bill to
    c.drawString(left, y, "Bill To:")
    y -= 14
    c.setFont("Helvetica", 9)
    c.drawString(left, y, data["customer_name"])
    y -= 12
    for line in data["customer_address"].splitlines():
        c.drawString(left, y, line)
        y -= 12
    y -= 12

    # Items
    columns = [
        ("Item", left),
        ("HSN", left + 190),
        ("Qty", left + 250),
        ("Unit Price", left + 290),
        ("GST%", left + 370),
        ("GST Amt", left + 410),
        ("Total", left + 470),
    ]
    c.setFont("Helvetica-Bold", 9)
    for label, x in columns:
        c.drawString(x, y, label)
    y -= 4
    c.line(left, y, right, y)
    y -= 12

    c.setFont("Helvetica", 9)
    for item in data["items"]:
        if y < 140:
            c.showPage()
            c.setFont("Helvetica", 9)
            y = height - 50
        row = [
            item["description"][:36],
            item["hsn_code"],
            str(item["quantity"]),
            format_price(item["unit_price"]),
            f"{item['gst_percentage']}%",
            format_price(item["gst_amount"]),
            format_price(item["total_amount"]),
        ]
        for (_, x), value in zip(columns, row):
            c.drawString(x, y, value)
        y -= 14

    c.line(left, y + 6, right, y + 6)
    y -= 12

    # Totals
    label_x = right - 200
    for label, value in _tax_summary_lines(data):
        c.drawString(label_x, y, label)
        c.drawRightString(right, y, value)
        y -= 13

    y -= 4
    c.setFont("Helvetica-Bold", 11)
    c.drawString(label_x, y, "Total Amount Due")
    c.drawRightString(right, y, format_price(data["total"]))
    y -= 24

    if data["prices_include_tax"]:
        c.setFont("Helvetica-Oblique", 7)
        c.drawString(left, y, TAX_NOTE[:118])
        c.drawString(left, y - 10, TAX_NOTE[118:])

    c.setFont("Helvetica-Oblique", 8)
    c.drawCentredString(width / 2, 40, "This is a computer-generated invoice. No signature required.")

    c.save()
    return buffer.getvalue()


def _invoice_path(order_id: int) -> Path:
    return Path(settings.invoice_dir) / f"invoice_{order_id}.pdf"


def invoice_exists(order_id: int) -> bool:
    """Check if invoice PDF exists"""
    return _invoice_path(order_id).exists()


def load_invoice_pdf(order_id: int) -> Optional[bytes]:
    """
    Load invoice PDF if it exists.
    Returns None if invoice not found (DO NOT raise).
    """
    invoice_path = _invoice_path(order_id)

    if not invoice_path.exists():
        return None

    return invoice_path.read_bytes()


def save_invoice_pdf(order_id: int, pdf: bytes) -> Path:
    invoice_path = _invoice_path(order_id)
    invoice_path.parent.mkdir(parents=True, exist_ok=True)
    invoice_path.write_bytes(pdf)
    logger.info(f"Invoice PDF stored at {invoice_path}")
    return invoice_path


def get_invoice_pdf(invoice: Invoice, order: Order, items: List[OrderItem]) -> bytes:
    pdf = load_invoice_pdf(order.id)
    if pdf is None:
        pdf = render_invoice_pdf(build_invoice_data(invoice, order, items))
        save_invoice_pdf(order.id, pdf)
    return pdf
