# quantity_transformer.py
"""
Quantity dropdown options built from a quantity group's comma-separated
``values`` string, plus the custom-quantity rules the storefront enforces.

Nothing in here raises on bad configuration: empty tokens are dropped,
unknown tokens become label-only options, and validation failures come
back as ValidationResult values.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

import pricing_config as cfg

CUSTOM_TOKEN = "custom"
CUSTOM_LABEL = "Custom..."

_LEADING_INT = re.compile(r"^[+-]?\d+")

Number = Union[int, float]


@dataclass(frozen=True)
class QuantityGroup:
    id: str
    values: Optional[str]
    default_value: Optional[str] = None
    custom_min: Optional[int] = None
    custom_max: Optional[int] = None
    name: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QuantityGroup":
        return cls(
            id=str(d["id"]),
            values=d.get("values"),
            default_value=d.get("defaultValue"),
            custom_min=d.get("customMin"),
            custom_max=d.get("customMax"),
            name=d.get("name") or "",
        )


@dataclass(frozen=True)
class Quantity:
    id: str
    name: str
    value: Optional[int]
    is_custom: bool
    min_value: Optional[int] = None
    max_value: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "isCustom": self.is_custom,
            "minValue": self.min_value,
            "maxValue": self.max_value,
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"isValid": self.is_valid}
        if self.error is not None:
            out["error"] = self.error
        return out


def format_number(n: Number) -> str:
    """Thousands-separated, at most 3 decimals (5000 -> '5,000')."""
    if isinstance(n, float) and n.is_integer():
        n = int(n)
    if isinstance(n, int):
        return f"{n:,}"
    return f"{n:,.3f}".rstrip("0").rstrip(".")


def _parse_int(token: str) -> Optional[int]:
    # "250pcs" -> 250, "12.5" -> 12, "abc" -> None
    m = _LEADING_INT.match(token)
    return int(m.group(0)) if m else None


def _tokens(values: Optional[str]) -> List[str]:
    if not values:
        return []
    return [t.strip() for t in values.split(",") if t.strip()]


def transform_quantity_group(group: QuantityGroup) -> List[Quantity]:
    out: List[Quantity] = []
    for i, token in enumerate(_tokens(group.values)):
        qid = f"{group.id}-{i}"
        if token.lower() == CUSTOM_TOKEN:
            out.append(
                Quantity(
                    id=qid,
                    name=CUSTOM_LABEL,
                    value=None,
                    is_custom=True,
                    min_value=group.custom_min,
                    max_value=group.custom_max,
                )
            )
        else:
            out.append(Quantity(id=qid, name=token, value=_parse_int(token), is_custom=False))
    return out


def transform_quantity_groups(groups: Iterable[QuantityGroup]) -> List[Quantity]:
    out: List[Quantity] = []
    for g in groups:
        out.extend(transform_quantity_group(g))
    return out


def find_default_quantity(quantities: Iterable[Quantity], default_value: Optional[str]) -> Optional[Quantity]:
    """
    Pick the preselected option for a dropdown.

    "custom" (any case) selects the first custom option. Anything else matches
    an option by its label or by its numeric value rendered as a string.
    Returns None when nothing matches.
    """
    if default_value is None:
        return None

    if default_value.lower() == CUSTOM_TOKEN:
        return next((q for q in quantities if q.is_custom), None)

    for q in quantities:
        if q.name == default_value:
            return q
        if q.value is not None and str(q.value) == default_value:
            return q
    return None


def validate_custom_quantity(value: Number, custom_quantity: Quantity) -> ValidationResult:
    # Order of checks is fixed; the first failure wins.
    if not custom_quantity.is_custom:
        return ValidationResult(False, "Quantity is not a custom option")

    # NaN fails every comparison below and inf breaks the increment math
    if not math.isfinite(value):
        return ValidationResult(False, "Quantity must be a finite number")

    if value <= 0:
        return ValidationResult(False, "Quantity must be greater than 0")

    step = cfg.GANG_RUN_INCREMENT
    if value > step and value % step != 0:
        lower = math.floor(value / step) * step
        upper = math.ceil(value / step) * step
        return ValidationResult(
            False,
            f"Quantities above {step} must be in increments of {step}. "
            f"Try {format_number(lower)} or {format_number(upper)}",
        )

    if custom_quantity.min_value is not None and value < custom_quantity.min_value:
        return ValidationResult(False, f"Minimum quantity is {format_number(custom_quantity.min_value)}")

    if custom_quantity.max_value is not None and value > custom_quantity.max_value:
        return ValidationResult(False, f"Maximum quantity is {format_number(custom_quantity.max_value)}")

    return ValidationResult(True)


def get_quantity_display_text(quantity: Quantity, custom_value: Optional[Number] = None) -> str:
    if quantity.is_custom:
        if custom_value is not None:
            return f"Custom: {format_number(custom_value)} units"
        return "Custom quantity"

    if quantity.value is not None:
        return f"{format_number(quantity.value)} units"

    return quantity.name
