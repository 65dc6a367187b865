# pricing_engine.py
from dataclasses import dataclass
from math import ceil
from typing import Dict, Any, Iterable, List, Optional, Tuple

import pricing_config as cfg
import tuning_knobs as knobs
from catalog import (
    PaperException,
    ProductPricingConfig,
    StandardQuantity,
    StandardSize,
    sides_multiplier as lookup_sides_multiplier,
)
from quantity_transformer import validate_custom_quantity

FORMULA = "Paper Stock × Sides Multiplier × Size × Quantity"


@dataclass(frozen=True)
class AddonSelection:
    addon_id: str
    units: Optional[int] = None


@dataclass(frozen=True)
class QuoteInputs:
    paper_stock_id: str
    paper_price_per_sq_in: float
    sides: str
    size_selection: str  # "standard" | "custom"
    quantity_selection: str  # "standard" | "custom"
    standard_size: Optional[StandardSize] = None
    custom_width: Optional[float] = None
    custom_height: Optional[float] = None
    standard_quantity: Optional[StandardQuantity] = None
    custom_quantity: Optional[int] = None
    paper_type: str = "cardstock"  # "cardstock" | "text"
    turnaround: str = cfg.DEFAULT_TURNAROUND
    addons: Tuple[AddonSelection, ...] = ()
    broker_discount_percent: float = 0.0


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValueError(msg)


def _size_value(x: QuoteInputs, pc: ProductPricingConfig) -> float:
    if x.size_selection == "custom":
        _require(
            x.custom_width is not None and x.custom_height is not None,
            "custom size requires width and height",
        )
        errors = pc.check_custom_size(x.custom_width, x.custom_height)
        _require(not errors, "; ".join(errors))
        return x.custom_width * x.custom_height

    _require(x.size_selection == "standard", f"unknown size selection: {x.size_selection}")
    _require(x.standard_size is not None, "standard size selection requires size data")
    # Seeded area, not width x height
    area = x.standard_size.pre_calculated_value
    _require(area > 0, f"standard size {x.standard_size.name} has no pre-calculated value")
    return area


def _quantity_value(x: QuoteInputs, pc: ProductPricingConfig) -> int:
    if x.quantity_selection == "custom":
        _require(pc.allow_custom_quantity, "custom quantity is not available for this product")
        _require(x.custom_quantity is not None, "custom quantity selection requires quantity value")
        result = validate_custom_quantity(x.custom_quantity, pc.custom_quantity_option())
        _require(result.is_valid, result.error or "invalid custom quantity")
        return int(x.custom_quantity)

    _require(x.quantity_selection == "standard", f"unknown quantity selection: {x.quantity_selection}")
    _require(x.standard_quantity is not None, "standard quantity selection requires quantity data")
    qty = x.standard_quantity.pricing_quantity()
    _require(qty > 0, f"standard quantity {x.standard_quantity.display_value} has no calculation value")
    return qty


def _tier_for(tiers: List[Dict[str, Any]], qty: int) -> Optional[Dict[str, Any]]:
    for tier in tiers:
        hi = tier.get("max_quantity")
        if qty >= tier["min_quantity"] and (hi is None or qty <= hi):
            return tier
    return None


def _addon_cost(
    addon: Dict[str, Any],
    sel: AddonSelection,
    qty: int,
    paper_type: str,
    adjusted_price: float,
    after_turnaround: float,
) -> Tuple[float, str]:
    model = addon["pricing_model"]

    if model == "FLAT":
        cost = addon.get("flat_price", 0.0)
        return cost, f"Flat fee: ${cost:.2f}"

    if model == "PERCENTAGE":
        pct = addon.get("percentage", 0.0)
        applies_to = addon.get("applies_to", "base_price")
        basis = after_turnaround if applies_to == "after_turnaround" else adjusted_price
        cost = basis * pct / 100
        return cost, f"{pct}% of {applies_to}: ${cost:.2f}"

    if model == "PER_UNIT":
        setup = addon.get("setup_fee", 0.0)
        per_unit = addon.get("price_per_unit", 0.0)
        units = sel.units or qty
        cost = setup + per_unit * units
        unit_type = addon.get("unit_type", "piece")
        if setup > 0:
            return cost, f"${setup} setup + ${per_unit} × {units} {unit_type}s"
        return cost, f"${per_unit} × {units} {unit_type}s"

    if model == "CUSTOM":
        if "units_per_bundle" in addon:
            bundles = ceil(qty / addon["units_per_bundle"])
            cost = addon.get("price_per_unit", 0.0) * bundles
            return cost, f"{bundles} bundles × ${addon.get('price_per_unit', 0.0)}"
        if paper_type == "text":
            setup = addon.get("text_paper_price", 0.0)
            per_piece = addon.get("text_paper_per_piece", 0.0)
            return setup + per_piece * qty, f"Text paper: ${setup} + ${per_piece}/pc × {qty}"
        setup = addon.get("card_stock_price", 0.0)
        per_piece = addon.get("card_stock_per_piece", 0.0)
        return setup + per_piece * qty, f"Card stock: ${setup} + ${per_piece}/pc × {qty}"

    if model == "TIERED":
        tier = _tier_for(addon.get("tiers", []), qty)
        if tier is None:
            return 0.0, ""
        if tier.get("price_per_unit"):
            cost = tier["price"] + tier["price_per_unit"] * qty
            return cost, f"Tier {tier['min_quantity']}+: ${tier['price']} + ${tier['price_per_unit']}/pc"
        return tier["price"], f"Tier {tier['min_quantity']}+: ${tier['price']}"

    raise ValueError(f"unsupported pricing model: {model}")


def calculate_quote(
    x: QuoteInputs,
    *,
    pricing_config: Optional[ProductPricingConfig] = None,
    paper_exceptions: Iterable[PaperException] = (),
) -> Dict[str, Any]:
    pc = pricing_config or ProductPricingConfig(product_id="default")

    # ---- Basic validation ----
    _require(x.paper_price_per_sq_in > 0, "paper price must be greater than 0")
    _require(x.sides in cfg.SIDES, f"unknown sides: {x.sides}")
    _require(
        x.turnaround in knobs.TURNAROUND_MARKUP_PERCENT,
        f"unsupported turnaround: {x.turnaround}",
    )
    _require(0 <= x.broker_discount_percent < 100, "broker discount must be between 0 and 100")
    for sel in x.addons:
        _require(sel.addon_id in knobs.ADDONS, f"unknown add-on: {sel.addon_id}")

    # ---- Base price ----
    size = _size_value(x, pc)
    quantity = _quantity_value(x, pc)
    sides_mult = lookup_sides_multiplier(x.paper_stock_id, x.sides, paper_exceptions)

    base_price = x.paper_price_per_sq_in * sides_mult * size * quantity

    # ---- Adjustments (before turnaround) ----
    selected = {sel.addon_id for sel in x.addons}
    adjusted = base_price

    broker_amount = 0.0
    if x.broker_discount_percent > 0:
        broker_amount = base_price * x.broker_discount_percent / 100
        adjusted -= broker_amount

    # Tagline discount is not stacked on a broker discount
    tagline_amount = 0.0
    if "our_tagline" in selected and broker_amount == 0:
        tagline_amount = base_price * cfg.TAGLINE_DISCOUNT_PERCENT / 100
        adjusted -= tagline_amount

    exact_size_amount = 0.0
    if "exact_size" in selected:
        exact_size_amount = adjusted * cfg.EXACT_SIZE_MARKUP_PERCENT / 100
        adjusted += exact_size_amount

    # ---- Turnaround ----
    markup_pct = knobs.TURNAROUND_MARKUP_PERCENT[x.turnaround]
    turnaround_amount = adjusted * markup_pct / 100
    after_turnaround = adjusted + turnaround_amount

    # ---- Add-ons ----
    addon_lines = []
    addons_total = 0.0
    for sel in x.addons:
        addon = knobs.ADDONS[sel.addon_id]
        if addon["pricing_model"] == "ADJUSTMENT":
            continue
        cost, calc = _addon_cost(addon, sel, quantity, x.paper_type, adjusted, after_turnaround)
        if cost > 0:
            addon_lines.append(
                {"id": sel.addon_id, "name": addon["name"], "cost": round(cost, 2), "calculation": calc}
            )
            addons_total += cost

    before_tax = after_turnaround + addons_total
    unit_price = before_tax / quantity

    breakdown = {
        "formula": FORMULA,
        "paper_price_per_sq_in": x.paper_price_per_sq_in,
        "sides_multiplier": sides_mult,
        "size": round(size, 4),
        "quantity": quantity,
        "calculation": f"({x.paper_price_per_sq_in} × {sides_mult} × {size} × {quantity}) = {base_price}",
        "base_price": round(base_price, 2),
        "broker_discount": round(broker_amount, 2),
        "tagline_discount": round(tagline_amount, 2),
        "exact_size_markup": round(exact_size_amount, 2),
        "price_after_adjustments": round(adjusted, 2),
        "turnaround": x.turnaround,
        "turnaround_days": cfg.TURNAROUND_BUSINESS_DAYS.get(x.turnaround),
        "turnaround_markup_percent": markup_pct,
        "turnaround_markup": round(turnaround_amount, 2),
        "price_after_turnaround": round(after_turnaround, 2),
        "addons": addon_lines,
        "addons_total": round(addons_total, 2),
        "total_price": round(before_tax, 2),
        "unit_price": round(unit_price, 4),
    }

    return breakdown


def format_breakdown(result: Dict[str, Any]) -> List[str]:
    lines = [
        "BASE PRICING FORMULA CALCULATION:",
        f"Formula: {result['formula']}",
        f"  Base Paper Price: ${result['paper_price_per_sq_in']:.8f}",
        f"  Size: {result['size']} square inches",
        f"  Quantity: {result['quantity']}",
        f"  Sides Multiplier: {result['sides_multiplier']}x",
        f"Calculation: {result['calculation']}",
        f"BASE PRICE: ${result['base_price']:,.2f}",
    ]
    if result["broker_discount"]:
        lines.append(f"Broker discount: -${result['broker_discount']:,.2f}")
    if result["tagline_discount"]:
        lines.append(f"Tagline discount: -${result['tagline_discount']:,.2f}")
    if result["exact_size_markup"]:
        lines.append(f"Exact size markup: +${result['exact_size_markup']:,.2f}")
    lines.append(
        f"Turnaround ({result['turnaround']}, {result['turnaround_markup_percent']}%): "
        f"+${result['turnaround_markup']:,.2f}"
    )
    for a in result["addons"]:
        lines.append(f"{a['name']}: ${a['cost']:,.2f} ({a['calculation']})")
    lines.append(f"TOTAL: ${result['total_price']:,.2f}")
    return lines


if __name__ == "__main__":
    inputs = QuoteInputs(
        paper_stock_id="100lb-gloss-text",
        paper_price_per_sq_in=0.002,
        sides="double",
        size_selection="standard",
        standard_size=StandardSize("4x6", "4″ × 6″", 4.0, 6.0, 24.0),
        quantity_selection="standard",
        standard_quantity=StandardQuantity(5000, 5000),
        paper_type="text",
        turnaround="fast",
    )

    result = calculate_quote(
        inputs,
        paper_exceptions=[PaperException("100lb-gloss-text")],
    )
    print("\n".join(format_breakdown(result)))
