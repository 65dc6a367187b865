import pytest

from catalog import PaperException, ProductPricingConfig, StandardQuantity, StandardSize, default_pricing_config
from pricing_engine import AddonSelection, QuoteInputs, calculate_quote, format_breakdown

SIZE_4X6 = StandardSize("4x6", "4″ × 6″", 4.0, 6.0, 24.0, 10)
QTY_200 = StandardQuantity(200, 250, 5)
QTY_5000 = StandardQuantity(5000, 5000, 20)

TEXT_EXCEPTIONS = [PaperException("text-100")]


def _inputs(**overrides) -> QuoteInputs:
    base = dict(
        paper_stock_id="cardstock-14pt",
        paper_price_per_sq_in=0.002,
        sides="single",
        size_selection="standard",
        standard_size=SIZE_4X6,
        quantity_selection="standard",
        standard_quantity=QTY_5000,
        turnaround="economy",
    )
    base.update(overrides)
    return QuoteInputs(**base)


def test_standard_size_standard_quantity_cardstock():
    result = calculate_quote(_inputs(paper_price_per_sq_in=0.00145833333))

    assert result["size"] == 24.0
    assert result["quantity"] == 5000
    assert result["sides_multiplier"] == 1.0
    assert result["base_price"] == pytest.approx(175.0, abs=0.01)


def test_uses_pre_calculated_area_not_dimensions():
    odd = StandardSize("odd", "odd", 4.0, 6.0, 30.0)
    result = calculate_quote(_inputs(standard_size=odd))
    assert result["size"] == 30.0


def test_small_quantity_uses_calculation_value():
    result = calculate_quote(_inputs(standard_quantity=QTY_200, paper_price_per_sq_in=1.0))
    assert result["quantity"] == 250


def test_custom_size_text_paper_double_sided():
    result = calculate_quote(
        _inputs(
            paper_stock_id="text-100",
            sides="double",
            size_selection="custom",
            standard_size=None,
            custom_width=4.0,
            custom_height=6.0,
            standard_quantity=QTY_200,
        ),
        paper_exceptions=TEXT_EXCEPTIONS,
    )
    assert result["size"] == 24.0
    assert result["quantity"] == 250
    assert result["sides_multiplier"] == 1.75
    assert result["base_price"] == pytest.approx(21.0)


@pytest.mark.parametrize(
    "paper,sides,multiplier,base",
    [
        ("text-100", "double", 1.75, 420.0),
        ("text-100", "single", 1.0, 240.0),
        ("cardstock-14pt", "double", 1.0, 240.0),
        ("cardstock-14pt", "single", 1.0, 240.0),
    ],
)
def test_sides_multiplier(paper, sides, multiplier, base):
    result = calculate_quote(_inputs(paper_stock_id=paper, sides=sides), paper_exceptions=TEXT_EXCEPTIONS)
    assert result["sides_multiplier"] == multiplier
    assert result["base_price"] == pytest.approx(base)


def test_custom_quantity_is_used_as_is():
    result = calculate_quote(
        _inputs(quantity_selection="custom", standard_quantity=None, custom_quantity=750, paper_price_per_sq_in=0.001)
    )
    assert result["quantity"] == 750
    assert result["base_price"] == pytest.approx(18.0)


def test_custom_quantity_increment_rule():
    with pytest.raises(ValueError, match="Try 5,000 or 10,000"):
        calculate_quote(_inputs(quantity_selection="custom", standard_quantity=None, custom_quantity=7777))


def test_custom_quantity_product_bounds():
    pc = default_pricing_config("bc", "Business Cards")
    with pytest.raises(ValueError, match="Minimum quantity is 100"):
        calculate_quote(
            _inputs(quantity_selection="custom", standard_quantity=None, custom_quantity=50), pricing_config=pc
        )


def test_custom_quantity_disabled():
    pc = ProductPricingConfig("p", allow_custom_quantity=False)
    with pytest.raises(ValueError, match="custom quantity is not available"):
        calculate_quote(
            _inputs(quantity_selection="custom", standard_quantity=None, custom_quantity=500), pricing_config=pc
        )


def test_custom_size_disabled_for_business_cards():
    pc = default_pricing_config("bc", "Business Cards")
    with pytest.raises(ValueError, match="Custom size is not available"):
        calculate_quote(
            _inputs(size_selection="custom", standard_size=None, custom_width=3.5, custom_height=2.0),
            pricing_config=pc,
        )


def test_custom_size_step():
    with pytest.raises(ValueError, match="0.25 inch increments"):
        calculate_quote(_inputs(size_selection="custom", standard_size=None, custom_width=4.1, custom_height=6.0))


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"paper_price_per_sq_in": 0}, "paper price"),
        ({"sides": "triple"}, "unknown sides"),
        ({"turnaround": "yesterday"}, "unsupported turnaround"),
        ({"addons": (AddonSelection("gold_leaf"),)}, "unknown add-on"),
        ({"standard_size": None}, "requires size data"),
        ({"standard_quantity": None}, "requires quantity data"),
        ({"size_selection": "weird"}, "unknown size selection"),
        ({"broker_discount_percent": 150}, "broker discount"),
    ],
)
def test_invalid_inputs(overrides, message):
    with pytest.raises(ValueError, match=message):
        calculate_quote(_inputs(**overrides))


# ----------------------------
# Adjustments + turnaround
# ----------------------------
def test_economy_turnaround_markup():
    result = calculate_quote(_inputs())
    assert result["turnaround_markup_percent"] == 10
    assert result["turnaround_days"] == 7
    assert result["turnaround_markup"] == pytest.approx(24.0)
    assert result["total_price"] == pytest.approx(264.0)
    assert result["unit_price"] == pytest.approx(264.0 / 5000, abs=1e-4)


def test_broker_discount_blocks_tagline_discount():
    result = calculate_quote(
        _inputs(broker_discount_percent=10, addons=(AddonSelection("our_tagline"),))
    )
    assert result["broker_discount"] == pytest.approx(24.0)
    assert result["tagline_discount"] == 0
    assert result["price_after_adjustments"] == pytest.approx(216.0)
    assert result["total_price"] == pytest.approx(237.6)


def test_tagline_then_exact_size_then_turnaround():
    result = calculate_quote(
        _inputs(turnaround="fast", addons=(AddonSelection("our_tagline"), AddonSelection("exact_size")))
    )
    assert result["tagline_discount"] == pytest.approx(12.0)
    assert result["exact_size_markup"] == pytest.approx(28.5)
    assert result["price_after_adjustments"] == pytest.approx(256.5)
    assert result["turnaround_markup"] == pytest.approx(76.95)
    assert result["total_price"] == pytest.approx(333.45)
    # adjustments are not listed as add-on charges
    assert result["addons"] == []


# ----------------------------
# Add-ons
# ----------------------------
def _addon_cost(addon_id, units=None, **overrides):
    result = calculate_quote(_inputs(addons=(AddonSelection(addon_id, units),), **overrides))
    (line,) = result["addons"]
    return line


def test_flat_addon():
    assert _addon_cost("digital_proof")["cost"] == pytest.approx(5.0)


def test_percentage_addon_on_base():
    assert _addon_cost("foil_stamping")["cost"] == pytest.approx(60.0)


def test_percentage_addon_after_turnaround():
    assert _addon_cost("spot_uv")["cost"] == pytest.approx(52.8)


def test_per_unit_addon_defaults_to_quantity():
    line = _addon_cost("perforation")
    assert line["cost"] == pytest.approx(70.0)
    assert line["calculation"].startswith("$20.0 setup")


def test_per_unit_addon_with_units():
    assert _addon_cost("numbering", units=200)["cost"] == pytest.approx(20.0)


def test_custom_addon_by_paper_type():
    assert _addon_cost("folding", paper_type="text")["cost"] == pytest.approx(50.17)
    assert _addon_cost("folding", paper_type="cardstock")["cost"] == pytest.approx(100.34)


def test_custom_addon_per_bundle():
    line = _addon_cost("banding")
    assert line["cost"] == pytest.approx(37.5)
    assert line["calculation"].startswith("50 bundles")


def test_tiered_addon():
    assert _addon_cost("eddm_process")["cost"] == pytest.approx(1070.0)
    assert _addon_cost("eddm_process", standard_quantity=QTY_200)["cost"] == pytest.approx(50.0 + 0.239 * 250)


def test_addons_add_to_total():
    result = calculate_quote(_inputs(addons=(AddonSelection("digital_proof"), AddonSelection("qr_code"))))
    assert result["addons_total"] == pytest.approx(10.0)
    assert result["total_price"] == pytest.approx(274.0)


def test_format_breakdown():
    result = calculate_quote(_inputs(addons=(AddonSelection("digital_proof"),)))
    lines = format_breakdown(result)
    assert lines[0] == "BASE PRICING FORMULA CALCULATION:"
    assert "BASE PRICE: $240.00" in lines
    assert "Digital Proof: $5.00 (Flat fee: $5.00)" in lines
    assert lines[-1] == "TOTAL: $269.00"
