# tuning_knobs.py
"""
TUNING KNOBS (EDIT THIS FILE)

This is the ONLY file you should need to edit to turn catalog entries on/off
and to adjust per-product custom limits. Master data lives in pricing_config.py.
"""
import pricing_config as cfg

# ============================================================
# 1) STANDARD SIZE AVAILABILITY
# ============================================================
# If a size is not listed here it is enabled.
SIZE_ENABLED = {
    "3.5x1": True,
    "11x25.5": True,
    "24x36": True,
}

# ============================================================
# 2) STANDARD QUANTITY AVAILABILITY
# ============================================================
QUANTITY_ENABLED = {
    150: True,
    300: True,
    400: True,
}

# ============================================================
# 3) TURNAROUND PRESETS
# ============================================================
TURNAROUND_PRESET = "normal"  # "normal", "no_rush", "rush_only"

TURNAROUND_PRESETS = {
    "normal":    {"economy": True,  "fast": True,  "faster": True,  "crazy_fast": True},
    "no_rush":   {"economy": True,  "fast": True,  "faster": False, "crazy_fast": False},
    "rush_only": {"economy": False, "fast": False, "faster": True,  "crazy_fast": True},
}

TURNAROUND_ENABLED = TURNAROUND_PRESETS.get(
    TURNAROUND_PRESET, {"economy": True, "fast": True, "faster": True, "crazy_fast": True}
)

# ============================================================
# 4) ADD-ON AVAILABILITY
# ============================================================
ADDON_ENABLED = {
    "eddm_process": True,
    "numbering": True,
}

# ============================================================
# 5) PRODUCT TYPES
# ============================================================
# Matched against the lowercased product name, first hit wins.
PRODUCT_TYPES = ("business card", "postcard", "flyer", "brochure", "poster")

PRODUCT_TYPE_SIZES = {
    "business card": ["3.5x2", "2x2", "3.5x1"],
    "postcard": ["4x6", "5x7", "6x9", "6x11"],
    "flyer": ["5.5x8.5", "8.5x11", "11x17"],
    "brochure": ["8.5x11", "8.5x14", "11x25.5"],
    "poster": ["12x18", "18x24", "24x36"],
}
DEFAULT_PRODUCT_SIZES = ["4x6", "5x7", "8.5x11", "11x17"]

PRODUCT_TYPE_QUANTITIES = {
    "business card": [100, 250, 500, 1000, 2500, 5000, 10000],
    "postcard": [50, 100, 250, 500, 1000, 2500, 5000],
    "flyer": [25, 50, 100, 250, 500, 1000, 2500, 5000],
    "brochure": [25, 50, 100, 250, 500, 1000, 2500, 5000],
    "poster": [25, 50, 100, 250],
}
DEFAULT_PRODUCT_QUANTITIES = [100, 250, 500, 1000, 2500, 5000]

# Applied on top of pricing_config.DEFAULT_PRICING_CONFIG and the built-in
# business card / gang-run rules.
PRODUCT_TYPE_OVERRIDES = {
    "poster": {"min_custom_quantity": 1, "max_custom_quantity": 250},
}

# ============================================================
# Filtered catalog (do not edit below)
# ============================================================
ACTIVE_STANDARD_SIZES = {
    name: row for name, row in cfg.STANDARD_SIZES.items() if SIZE_ENABLED.get(name, True)
}

ACTIVE_STANDARD_QUANTITIES = {
    qty: row for qty, row in cfg.STANDARD_QUANTITIES.items() if QUANTITY_ENABLED.get(qty, True)
}

TURNAROUND_MARKUP_PERCENT = {
    name: pct
    for name, pct in cfg.TURNAROUND_MARKUP_PERCENT.items()
    if TURNAROUND_ENABLED.get(name, False)
}

ADDONS = {addon_id: a for addon_id, a in cfg.ADDONS.items() if ADDON_ENABLED.get(addon_id, True)}


def product_type_for(product_name: str):
    name = (product_name or "").lower()
    for t in PRODUCT_TYPES:
        if t in name:
            return t
    return None
