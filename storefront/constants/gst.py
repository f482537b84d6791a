SUPPORTED_GST_RATES = (0, 5, 12, 18)

# shipping is charged GST at a flat rate, independent of product rates
SHIPPING_GST_RATE = 5

GST_RATE_DESCRIPTIONS = {
    0: "GST 0% (Exempted)",
    5: "GST 5% (Essential Items)",
    12: "GST 12% (General Items)",
    18: "GST 18% (Premium Items)",
}

# home state -> regions taxed as the same jurisdiction
DEFAULT_LINKED_REGIONS = {
    "Tamil Nadu": ["Puducherry", "Pondicherry"],
}

DEFAULT_HOME_STATE = "Tamil Nadu"
