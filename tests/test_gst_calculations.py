from decimal import Decimal

import pytest

from storefront.constants.gst import DEFAULT_LINKED_REGIONS, SUPPORTED_GST_RATES
from storefront.services.gst_calculations import (
    JurisdictionMode,
    LineItem,
    PricingValidationError,
    ShippingConfig,
    SplitComponents,
    classify_jurisdiction,
    compute_order_totals,
    quote_shipping,
    resolve_tax,
    split_tax,
)
from storefront.utils.money import round_money

D = Decimal


def cart_lines():
    return [
        LineItem(unit_price=D("200"), quantity=2, tax_rate_percent=5, price_includes_tax=True, name="Ghee"),
        LineItem(unit_price=D("100"), quantity=1, tax_rate_percent=18, price_includes_tax=False, name="Soap"),
    ]


# resolve_tax

def test_inclusive_price_is_resolved_on_the_line_amount():
    line = LineItem(unit_price=D("100"), quantity=2, tax_rate_percent=5)
    breakdown = resolve_tax(line.line_amount, 5, inclusive=True)

    assert breakdown.base_amount == D("190.48")
    assert breakdown.tax_amount == D("9.52")
    assert breakdown.total == D("200.00")


def test_exclusive_price_adds_tax_on_top():
    breakdown = resolve_tax(D("100"), 18, inclusive=False)

    assert breakdown.base_amount == D("100.00")
    assert breakdown.tax_amount == D("18.00")
    assert breakdown.total == D("118.00")


@pytest.mark.parametrize("amount", ["0", "0.01", "1", "99.99", "249.50", "1234.56"])
@pytest.mark.parametrize("rate", SUPPORTED_GST_RATES)
def test_inclusive_base_and_tax_add_back_to_amount(amount, rate):
    breakdown = resolve_tax(D(amount), rate, inclusive=True)
    assert abs(breakdown.base_amount + breakdown.tax_amount - D(amount)) <= D("0.01")


@pytest.mark.parametrize("inclusive", [True, False])
def test_zero_rate_never_charges_tax(inclusive):
    breakdown = resolve_tax(D("123.45"), 0, inclusive=inclusive)

    assert breakdown.tax_amount == D("0")
    assert breakdown.base_amount == D("123.45")


# classify_jurisdiction

def test_same_state_is_split_local():
    assert classify_jurisdiction("Tamil Nadu", "Tamil Nadu") is JurisdictionMode.SPLIT_LOCAL


def test_state_names_are_compared_after_trim_and_casefold():
    assert classify_jurisdiction("  tamil NADU ", "Tamil Nadu") is JurisdictionMode.SPLIT_LOCAL


def test_linked_region_counts_as_local():
    mode = classify_jurisdiction("Puducherry", "Tamil Nadu", DEFAULT_LINKED_REGIONS)
    assert mode is JurisdictionMode.SPLIT_LOCAL

    mode = classify_jurisdiction("pondicherry", "Tamil Nadu", DEFAULT_LINKED_REGIONS)
    assert mode is JurisdictionMode.SPLIT_LOCAL


def test_linked_region_only_applies_to_its_home_state():
    assert classify_jurisdiction("Puducherry", "Tamil Nadu") is JurisdictionMode.SINGLE_CROSS
    assert (
        classify_jurisdiction("Puducherry", "Kerala", DEFAULT_LINKED_REGIONS)
        is JurisdictionMode.SINGLE_CROSS
    )


def test_distant_or_blank_state_is_single_cross():
    assert classify_jurisdiction("Karnataka", "Tamil Nadu") is JurisdictionMode.SINGLE_CROSS
    assert classify_jurisdiction("", "") is JurisdictionMode.SINGLE_CROSS


# split_tax

def test_split_gives_the_odd_paisa_to_the_second_half():
    split = split_tax(D("10.01"), JurisdictionMode.SPLIT_LOCAL)

    assert split.cgst == D("5.01")
    assert split.sgst == D("5.00")
    assert split.cgst + split.sgst == D("10.01")
    assert split.igst == D("0")


@pytest.mark.parametrize("tax", ["0.01", "0.03", "9.52", "19.05", "1000.99"])
def test_split_conserves_the_tax_amount(tax):
    split = split_tax(D(tax), JurisdictionMode.SPLIT_LOCAL)
    assert split.total == D(tax)


def test_cross_state_split_is_a_single_component():
    split = split_tax(D("9.52"), JurisdictionMode.SINGLE_CROSS)

    assert split.igst == D("9.52")
    assert split.as_dict() == {"igst": D("9.52")}


def test_components_of_different_modes_cannot_be_added():
    with pytest.raises(ValueError):
        SplitComponents(JurisdictionMode.SPLIT_LOCAL) + SplitComponents(JurisdictionMode.SINGLE_CROSS)


# quote_shipping

def test_shipping_is_free_at_the_threshold():
    quote = quote_shipping(D("799"), D("40"), D("799"))

    assert quote.charge == D("0")
    assert quote.tax_on_charge == D("0")


def test_shipping_is_charged_just_below_the_threshold():
    quote = quote_shipping(D("798.99"), D("40"), D("799"))

    assert quote.charge == D("40.00")
    assert quote.tax_on_charge == D("2.00")
    assert quote.total == D("42.00")


def test_shipping_without_threshold_is_always_charged():
    assert quote_shipping(D("100000"), D("40"), None).charge == D("40.00")


# compute_order_totals

def test_local_order_totals():
    summary = compute_order_totals(
        cart_lines(), "Tamil Nadu", ShippingConfig(D("40"), D("500")), "Tamil Nadu"
    )

    assert summary.mode is JurisdictionMode.SPLIT_LOCAL
    assert summary.subtotal == D("480.95")
    assert summary.item_tax == D("37.05")
    assert summary.order_value_before_shipping == D("518.00")
    assert summary.shipping_charge == D("0.00")
    assert summary.shipping_tax == D("0.00")
    assert summary.split.cgst == D("18.53")
    assert summary.split.sgst == D("18.52")
    assert summary.grand_total == D("518.00")


def test_lines_are_split_individually():
    summary = compute_order_totals(
        cart_lines(), "Tamil Nadu", ShippingConfig(D("40"), D("500")), "Tamil Nadu"
    )
    ghee, soap = summary.lines

    assert (ghee.base_amount, ghee.tax_amount) == (D("380.95"), D("19.05"))
    assert (ghee.split.cgst, ghee.split.sgst) == (D("9.53"), D("9.52"))
    assert ghee.line_total == D("400.00")
    assert (soap.base_amount, soap.tax_amount) == (D("100.00"), D("18.00"))
    assert soap.line_total == D("118.00")


def test_cross_state_order_includes_shipping_gst_in_igst():
    summary = compute_order_totals(
        cart_lines(), "Karnataka", ShippingConfig(D("80"), D("1000")), "Tamil Nadu"
    )

    assert summary.mode is JurisdictionMode.SINGLE_CROSS
    assert summary.shipping_charge == D("80.00")
    assert summary.shipping_tax == D("4.00")
    assert summary.split.igst == D("41.05")
    assert summary.total_tax == D("41.05")
    assert summary.grand_total == D("602.00")


def test_discount_comes_off_the_grand_total():
    summary = compute_order_totals(
        cart_lines(), "Tamil Nadu", ShippingConfig(D("40"), D("500")), "Tamil Nadu", D("51.80")
    )

    assert summary.discount == D("51.80")
    assert summary.grand_total == D("466.20")


@pytest.mark.parametrize(
    "state,config,discount",
    [
        ("Tamil Nadu", ShippingConfig(D("40"), D("500")), D("0")),
        ("Tamil Nadu", ShippingConfig(D("40"), D("5000")), D("12.34")),
        ("Karnataka", ShippingConfig(D("80"), None), D("0")),
        ("Kerala", ShippingConfig(D("49.99"), D("600")), D("100")),
    ],
)
def test_grand_total_matches_its_parts(state, config, discount):
    summary = compute_order_totals(cart_lines(), state, config, "Tamil Nadu", discount)

    expected = round_money(
        summary.subtotal
        + summary.item_tax
        + summary.shipping_charge
        + summary.shipping_tax
        - summary.discount
    )
    assert summary.grand_total == expected
    assert summary.split.total == summary.total_tax


def test_summary_dict_shape():
    data = compute_order_totals(
        cart_lines(), "Tamil Nadu", ShippingConfig(D("40"), D("500")), "Tamil Nadu"
    ).as_dict()

    assert data["gst_type"] == "CGST+SGST"
    assert data["tax_split"] == {"cgst": D("18.53"), "sgst": D("18.52")}
    assert [item["name"] for item in data["items"]] == ["Ghee", "Soap"]
    assert data["items"][0]["gst_percentage"] == 5


def test_invalid_lines_are_rejected_with_every_problem():
    lines = [
        LineItem(unit_price=D("-1"), quantity=1, tax_rate_percent=5, name="Broken"),
        LineItem(unit_price=D("10"), quantity=0, tax_rate_percent=5, name="Empty"),
        LineItem(unit_price=D("10"), quantity=1, tax_rate_percent=7, name="Odd rate"),
    ]

    with pytest.raises(PricingValidationError) as exc:
        compute_order_totals(lines, "Tamil Nadu", ShippingConfig(D("40")), "Tamil Nadu")

    assert len(exc.value.errors) == 3
    assert "Broken: price cannot be negative" in exc.value.errors
    assert "Empty: quantity must be at least 1" in exc.value.errors


def test_negative_discount_is_rejected():
    with pytest.raises(PricingValidationError):
        compute_order_totals(
            cart_lines(), "Tamil Nadu", ShippingConfig(D("40")), "Tamil Nadu", D("-5")
        )
