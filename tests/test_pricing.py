# tests/test_pricing.py
import pytest

from services.pricing import calculate_total_price, price_breakdown, to_number


def _spec(product_type, width, height=0, **flags):
    return {"type": product_type, "width": width, "height": height, **flags}


@pytest.mark.parametrize(
    "product_type, low, high",
    [
        ("porta_completa", 480, 1000),
        ("folha_de_porta", 200, 800),
        ("janela", 1200, 1200),
    ],
)
def test_base_price_tier_boundary(product_type, low, high):
    # height 0 keeps the area surcharge out of the way
    assert calculate_total_price(_spec(product_type, 89)) == low
    assert calculate_total_price(_spec(product_type, 90)) == high


def test_complete_door_with_installation():
    data = {"type": "porta_completa", "height": 200, "width": 100, "needs_installation": True}
    # 1000 base + 200 area (2 m²) + 120 installation
    assert calculate_total_price(data) == 1320


def test_area_surcharge_is_100_per_square_meter():
    breakdown = price_breakdown({"type": "janela", "height": "150", "width": "80"})
    assert breakdown["base"] == 1200
    assert breakdown["area"] == 120
    assert breakdown["total"] == 1320


def test_empty_or_unknown_type_is_zero():
    assert calculate_total_price({"type": "", "width": 100, "height": 200}) == 0
    assert calculate_total_price({"type": "garagem", "width": 100, "height": 200}) == 0
    assert calculate_total_price({}) == 0


def test_clearing_type_resets_price():
    data = {"type": "janela", "width": 100, "height": 100, "needs_installation": True}
    assert calculate_total_price(data) > 0
    data["type"] = ""
    assert calculate_total_price(data) == 0


def test_idempotent():
    data = {"type": "folha_de_porta", "width": "75", "height": "210", "lock_included": True}
    assert calculate_total_price(data) == calculate_total_price(data)


@pytest.mark.parametrize("product_type", ["porta_completa", "folha_de_porta", "janela"])
def test_installation_adds_120(product_type):
    base = _spec(product_type, 95, 210)
    with_install = _spec(product_type, 95, 210, needs_installation=True)
    assert calculate_total_price(with_install) - calculate_total_price(base) == pytest.approx(120)


def test_door_leaf_accessories():
    plain = calculate_total_price(_spec("folha_de_porta", 80, 210))
    lock = calculate_total_price(_spec("folha_de_porta", 80, 210, lock_included=True))
    hinge = calculate_total_price(_spec("folha_de_porta", 80, 210, hinge_included=True))
    both = calculate_total_price(_spec("folha_de_porta", 80, 210, lock_included=True, hinge_included=True))

    assert lock - plain == pytest.approx(75)
    assert hinge - plain == pytest.approx(75)
    assert both - plain == pytest.approx(150)


def test_accessories_ignored_for_other_types():
    plain = calculate_total_price(_spec("janela", 80, 100))
    flagged = calculate_total_price(_spec("janela", 80, 100, lock_included=True, hinge_included=True))
    assert flagged == plain


def test_blank_and_invalid_dimensions_count_as_zero():
    assert calculate_total_price({"type": "porta_completa", "width": "", "height": "abc"}) == 480
    assert to_number("  12,5 ") == 12.5
    assert to_number(None) == 0.0
    assert to_number("nan") == 0.0


def test_negative_dimensions_never_give_negative_price():
    assert calculate_total_price({"type": "janela", "width": -100, "height": 200}) >= 0
