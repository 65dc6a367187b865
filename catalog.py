# catalog.py
"""
Read-only catalog records the pricing math depends on.

Rows are fetched by the caller (API layer, seed script, tests) and handed
in as plain records; nothing here touches the database.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import pricing_config as cfg
import tuning_knobs as knobs
from quantity_transformer import CUSTOM_LABEL, Quantity, QuantityGroup


@dataclass(frozen=True)
class StandardSize:
    name: str
    display_name: str
    width: float
    height: float
    pre_calculated_value: float
    sort_order: int = 0
    is_active: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StandardSize":
        return cls(
            name=d["name"],
            display_name=d.get("displayName") or d["name"],
            width=float(d["width"]),
            height=float(d["height"]),
            pre_calculated_value=float(d["preCalculatedValue"]),
            sort_order=int(d.get("sortOrder") or 0),
            is_active=bool(d.get("isActive", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "width": self.width,
            "height": self.height,
            "preCalculatedValue": self.pre_calculated_value,
            "sortOrder": self.sort_order,
        }


@dataclass(frozen=True)
class StandardQuantity:
    display_value: int
    calculation_value: int
    sort_order: int = 0
    adjustment_value: Optional[int] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StandardQuantity":
        adj = d.get("adjustmentValue")
        return cls(
            display_value=int(d["displayValue"]),
            calculation_value=int(d["calculationValue"]),
            sort_order=int(d.get("sortOrder") or 0),
            adjustment_value=int(adj) if adj is not None else None,
            is_active=bool(d.get("isActive", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        # calculation/adjustment values stay server-side
        return {"displayValue": self.display_value, "sortOrder": self.sort_order}

    def pricing_quantity(self) -> int:
        """Quantity fed into the price formula for this catalog entry."""
        if self.display_value >= cfg.EXACT_QUANTITY_THRESHOLD:
            return self.display_value
        if self.adjustment_value is not None:
            return self.adjustment_value
        return self.calculation_value


@dataclass(frozen=True)
class PaperException:
    paper_stock_id: str
    exception_type: str = cfg.TEXT_PAPER
    double_sided_multiplier: float = cfg.TEXT_PAPER_DOUBLE_SIDED_MULTIPLIER
    description: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PaperException":
        multiplier = d.get("doubleSidedMultiplier")
        return cls(
            paper_stock_id=str(d["paperStockId"]),
            exception_type=d.get("exceptionType") or cfg.TEXT_PAPER,
            double_sided_multiplier=float(
                multiplier if multiplier is not None else cfg.TEXT_PAPER_DOUBLE_SIDED_MULTIPLIER
            ),
            description=d.get("description") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paperStockId": self.paper_stock_id,
            "exceptionType": self.exception_type,
            "doubleSidedMultiplier": self.double_sided_multiplier,
        }


@dataclass(frozen=True)
class ProductPricingConfig:
    product_id: str
    allow_custom_size: bool = True
    allow_custom_quantity: bool = True
    min_custom_width: float = 1.0
    max_custom_width: float = 48.0
    min_custom_height: float = 1.0
    max_custom_height: float = 48.0
    min_custom_quantity: int = 1
    max_custom_quantity: int = 1_000_000

    _KEYS = {
        "allowCustomSize": "allow_custom_size",
        "allowCustomQuantity": "allow_custom_quantity",
        "minCustomWidth": "min_custom_width",
        "maxCustomWidth": "max_custom_width",
        "minCustomHeight": "min_custom_height",
        "maxCustomHeight": "max_custom_height",
        "minCustomQuantity": "min_custom_quantity",
        "maxCustomQuantity": "max_custom_quantity",
    }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProductPricingConfig":
        kwargs = {attr: d[key] for key, attr in cls._KEYS.items() if d.get(key) is not None}
        return cls(product_id=str(d["productId"]), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"productId": self.product_id}
        for key, attr in self._KEYS.items():
            out[key] = getattr(self, attr)
        return out

    def custom_quantity_option(self) -> Quantity:
        return Quantity(
            id=f"{self.product_id}-custom",
            name=CUSTOM_LABEL,
            value=None,
            is_custom=True,
            min_value=self.min_custom_quantity,
            max_value=self.max_custom_quantity,
        )

    def check_custom_size(self, width: float, height: float) -> List[str]:
        errors: List[str] = []
        if not self.allow_custom_size:
            return ["Custom size is not available for this product"]

        for label, v, lo, hi in (
            ("Width", width, self.min_custom_width, self.max_custom_width),
            ("Height", height, self.min_custom_height, self.max_custom_height),
        ):
            if v is None or v <= 0:
                errors.append(f"{label} must be greater than 0")
                continue
            if not _on_step(v, cfg.CUSTOM_SIZE_STEP_IN):
                errors.append(f"{label} must be in {cfg.CUSTOM_SIZE_STEP_IN} inch increments. Received: {v}")
            if v < lo:
                errors.append(f"{label} must be at least {lo} inches")
            if v > hi:
                errors.append(f"{label} must be at most {hi} inches")
        return errors


def _on_step(v: float, step: float) -> bool:
    return math.isclose(v / step, round(v / step), abs_tol=1e-9)


# ----------------------------
# Row checks (write path)
# ----------------------------
def check_standard_size(s: StandardSize) -> List[str]:
    errors = []
    if s.width <= 0 or s.height <= 0:
        errors.append(f"{s.name}: width and height must be greater than 0")
    if s.pre_calculated_value <= 0:
        errors.append(f"{s.name}: pre-calculated value must be greater than 0")
    return errors


def check_standard_quantity(q: StandardQuantity) -> List[str]:
    errors = []
    if q.display_value <= 0 or q.calculation_value <= 0:
        errors.append(f"{q.display_value}: display and calculation values must be greater than 0")
    elif q.display_value >= cfg.EXACT_QUANTITY_THRESHOLD:
        if q.calculation_value != q.display_value:
            errors.append(
                f"{q.display_value}: calculation value must equal display value at or above "
                f"{cfg.EXACT_QUANTITY_THRESHOLD}"
            )
    elif q.calculation_value < q.display_value:
        errors.append(f"{q.display_value}: calculation value must not be below display value")
    return errors


# ----------------------------
# Paper exceptions
# ----------------------------
def paper_exception_for(paper_stock_id: str, exceptions: Iterable[PaperException]) -> Optional[PaperException]:
    for e in exceptions:
        if e.paper_stock_id == paper_stock_id:
            return e
    return None


def sides_multiplier(paper_stock_id: str, sides: str, exceptions: Iterable[PaperException]) -> float:
    """Double-sided text paper costs more; everything else prices at 1.0."""
    if sides != "double":
        return cfg.DEFAULT_SIDES_MULTIPLIER
    exc = paper_exception_for(paper_stock_id, exceptions)
    if exc is not None and exc.exception_type == cfg.TEXT_PAPER:
        return exc.double_sided_multiplier
    return cfg.DEFAULT_SIDES_MULTIPLIER


# ----------------------------
# Product pricing config
# ----------------------------
def default_pricing_config(
    product_id: str,
    product_name: str = "",
    gang_run_eligible: bool = False,
    min_gang_quantity: Optional[int] = None,
    max_gang_quantity: Optional[int] = None,
) -> ProductPricingConfig:
    values = dict(cfg.DEFAULT_PRICING_CONFIG)
    product_type = knobs.product_type_for(product_name)

    if product_type == "business card":
        values["allow_custom_size"] = False
        values["min_custom_quantity"] = 100
        values["max_custom_quantity"] = 100_000

    if gang_run_eligible:
        values["min_custom_quantity"] = min_gang_quantity or cfg.DEFAULT_MIN_GANG_QUANTITY
        values["max_custom_quantity"] = max_gang_quantity or cfg.DEFAULT_MAX_GANG_QUANTITY

    if product_type in knobs.PRODUCT_TYPE_OVERRIDES:
        values.update(knobs.PRODUCT_TYPE_OVERRIDES[product_type])

    return ProductPricingConfig(product_id=product_id, **values)


# ----------------------------
# Active catalog (from tuning_knobs)
# ----------------------------
def active_standard_sizes() -> List[StandardSize]:
    rows = [
        StandardSize(name, display, w, h, area, sort)
        for name, (display, w, h, area, sort) in knobs.ACTIVE_STANDARD_SIZES.items()
    ]
    return sorted(rows, key=lambda s: s.sort_order)


def active_standard_quantities() -> List[StandardQuantity]:
    rows = [
        StandardQuantity(display, calc, sort)
        for display, (calc, sort) in knobs.ACTIVE_STANDARD_QUANTITIES.items()
    ]
    return sorted(rows, key=lambda q: q.sort_order)


def find_standard_size(name: str, sizes: Iterable[StandardSize]) -> Optional[StandardSize]:
    return next((s for s in sizes if s.name == name and s.is_active), None)


def find_standard_quantity(display_value: int, quantities: Iterable[StandardQuantity]) -> Optional[StandardQuantity]:
    return next((q for q in quantities if q.display_value == display_value and q.is_active), None)


def quantities_listed(quantities: Iterable[StandardQuantity], listing: Iterable[Dict[str, Any]]) -> List[StandardQuantity]:
    """
    Local rows for the quantities a /catalog/quantities listing offers.

    The listing only carries display values, so calculation values come from
    the local catalog; listed values missing locally are dropped.
    """
    listed = {int(d["displayValue"]) for d in listing}
    return [q for q in quantities if q.display_value in listed]


def quantity_group_for_product(product_id: str, product_name: str, config: Optional[ProductPricingConfig] = None) -> QuantityGroup:
    """Quantity dropdown for a product: its standard quantities, then "custom" when allowed."""
    product_type = knobs.product_type_for(product_name)
    qtys = knobs.PRODUCT_TYPE_QUANTITIES.get(product_type, knobs.DEFAULT_PRODUCT_QUANTITIES)
    qtys = [q for q in qtys if q in knobs.ACTIVE_STANDARD_QUANTITIES]

    config = config or default_pricing_config(product_id, product_name)
    tokens = [str(q) for q in qtys]
    if config.allow_custom_quantity:
        tokens.append("custom")

    return QuantityGroup(
        id=product_id,
        values=",".join(tokens),
        default_value=tokens[0] if tokens else None,
        custom_min=config.min_custom_quantity,
        custom_max=config.max_custom_quantity,
        name=product_name,
    )


def sizes_for_product(product_name: str) -> List[StandardSize]:
    product_type = knobs.product_type_for(product_name)
    names = knobs.PRODUCT_TYPE_SIZES.get(product_type, knobs.DEFAULT_PRODUCT_SIZES)
    by_name = {s.name: s for s in active_standard_sizes()}
    return [by_name[n] for n in names if n in by_name]
