# esquadria/services/pricing.py

import math
from typing import Any, Dict, Mapping

from domain.models import PRODUCT_COMPLETE_DOOR, PRODUCT_DOOR_LEAF, PRODUCT_WINDOW

# (price for width <= WIDTH_TIER_LIMIT, price above it)
BASE_PRICES = {
    PRODUCT_COMPLETE_DOOR: (480.0, 1000.0),
    PRODUCT_DOOR_LEAF: (200.0, 800.0),
    PRODUCT_WINDOW: (1200.0, 1200.0),
}

WIDTH_TIER_LIMIT = 89  # cm, inclusive upper bound of the low tier
AREA_RATE = 100.0  # per m²
INSTALLATION_FEE = 120.0
LOCK_FEE = 75.0
HINGE_FEE = 75.0


def to_number(value: Any) -> float:
    """
    Coerce form input (number, numeric string, blank) to float.
    Blank or unparseable input counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def price_breakdown(data: Mapping[str, Any]) -> Dict[str, float]:
    """
    Split a quote's price into its components.

    Returns {"base", "area", "installation", "accessories", "total"}; all
    zero when the product type is empty or unknown.
    """
    product_type = data.get("type") or ""
    if product_type not in BASE_PRICES:
        return {"base": 0.0, "area": 0.0, "installation": 0.0, "accessories": 0.0, "total": 0.0}

    width = max(to_number(data.get("width")), 0.0)
    height = max(to_number(data.get("height")), 0.0)

    low, high = BASE_PRICES[product_type]
    base = low if width <= WIDTH_TIER_LIMIT else high

    area = (height * width / 10000) * AREA_RATE

    installation = INSTALLATION_FEE if data.get("needs_installation") else 0.0

    accessories = 0.0
    if product_type == PRODUCT_DOOR_LEAF:
        if data.get("lock_included"):
            accessories += LOCK_FEE
        if data.get("hinge_included"):
            accessories += HINGE_FEE

    total = round(base + area + installation + accessories, 2)

    return {
        "base": base,
        "area": round(area, 2),
        "installation": installation,
        "accessories": accessories,
        "total": total,
    }


def calculate_total_price(data: Mapping[str, Any]) -> float:
    """Total price of a quote specification, in BRL."""
    return price_breakdown(data)["total"]
