# pricing_config.py

# Custom quantities above this must be exact multiples of it (gang-run batching)
GANG_RUN_INCREMENT = 5000

# Standard quantities at or above this use the displayed value as-is
EXACT_QUANTITY_THRESHOLD = 5000

# Custom width/height must be entered in 1/4" steps
CUSTOM_SIZE_STEP_IN = 0.25

TEXT_PAPER = "TEXT_PAPER"
TEXT_PAPER_DOUBLE_SIDED_MULTIPLIER = 1.75
DEFAULT_SIDES_MULTIPLIER = 1.0

SIDES = ("single", "double")

# Product pricing config defaults (applies to every product unless overridden)
DEFAULT_PRICING_CONFIG = {
    "allow_custom_size": True,
    "allow_custom_quantity": True,
    "min_custom_width": 1.0,
    "max_custom_width": 48.0,
    "min_custom_height": 1.0,
    "max_custom_height": 48.0,
    "min_custom_quantity": 1,
    "max_custom_quantity": 1_000_000,
}

DEFAULT_MIN_GANG_QUANTITY = 100
DEFAULT_MAX_GANG_QUANTITY = 10_000

# Standard sizes: name -> (display name, width, height, pre-calculated sq in, sort order)
STANDARD_SIZES = {
    # Business cards
    "3.5x2": ("3.5″ × 2″ (Standard Business Card)", 3.5, 2.0, 7.0, 1),
    "2x2": ("2″ × 2″ (Square Mini)", 2.0, 2.0, 4.0, 2),
    "3.5x1": ("3.5″ × 1″ (Slim)", 3.5, 1.0, 3.5, 3),
    # Postcards
    "4x6": ("4″ × 6″ (Standard Postcard)", 4.0, 6.0, 24.0, 10),
    "5x7": ("5″ × 7″", 5.0, 7.0, 35.0, 11),
    "6x9": ("6″ × 9″", 6.0, 9.0, 54.0, 12),
    "6x11": ("6″ × 11″", 6.0, 11.0, 66.0, 13),
    # Flyers
    "5.5x8.5": ("5.5″ × 8.5″ (Half Letter)", 5.5, 8.5, 46.75, 20),
    "8.5x11": ("8.5″ × 11″ (Letter)", 8.5, 11.0, 93.5, 21),
    "11x17": ("11″ × 17″ (Tabloid)", 11.0, 17.0, 187.0, 22),
    # Brochures
    "8.5x14": ("8.5″ × 14″ (Legal)", 8.5, 14.0, 119.0, 30),
    "11x25.5": ("11″ × 25.5″ (Tri-fold)", 11.0, 25.5, 280.5, 31),
    # Squares
    "4x4": ("4″ × 4″ (Square)", 4.0, 4.0, 16.0, 40),
    "5x5": ("5″ × 5″ (Square)", 5.0, 5.0, 25.0, 41),
    "6x6": ("6″ × 6″ (Square)", 6.0, 6.0, 36.0, 42),
    "8x8": ("8″ × 8″ (Square)", 8.0, 8.0, 64.0, 43),
    # Large format
    "12x18": ("12″ × 18″", 12.0, 18.0, 216.0, 50),
    "18x24": ("18″ × 24″", 18.0, 24.0, 432.0, 51),
    "24x36": ("24″ × 36″", 24.0, 36.0, 864.0, 52),
}

# Standard quantities: display value -> (calculation value, sort order)
# Below 5000 the calculation value is inflated to recover setup cost.
STANDARD_QUANTITIES = {
    25: (50, 1),
    50: (75, 2),
    100: (125, 3),
    150: (175, 4),
    200: (250, 5),
    250: (300, 6),
    300: (350, 7),
    400: (450, 8),
    500: (550, 9),
    750: (800, 10),
    1000: (1050, 11),
    1500: (1550, 12),
    2000: (2050, 13),
    2500: (2550, 14),
    3000: (3050, 15),
    4000: (4050, 16),
    5000: (5000, 20),
    7500: (7500, 21),
    10000: (10000, 22),
    15000: (15000, 23),
    20000: (20000, 24),
    25000: (25000, 25),
    30000: (30000, 26),
    40000: (40000, 27),
    50000: (50000, 28),
    75000: (75000, 29),
    100000: (100000, 30),
}

# Turnaround: markup percent applied after discounts/markups, business days
TURNAROUND_MARKUP_PERCENT = {
    "economy": 10,
    "fast": 30,
    "faster": 50,
    "crazy_fast": 100,
}

TURNAROUND_BUSINESS_DAYS = {
    "economy": 7,
    "fast": 5,
    "faster": 3,
    "crazy_fast": 1,
}

DEFAULT_TURNAROUND = "economy"

# Adjustments applied to the base price before turnaround
TAGLINE_DISCOUNT_PERCENT = 5.0
EXACT_SIZE_MARKUP_PERCENT = 12.5

# Add-ons keyed by id
ADDONS = {
    "digital_proof": {
        "name": "Digital Proof",
        "pricing_model": "FLAT",
        "flat_price": 5.00,
    },
    "our_tagline": {
        "name": "Our Tagline",
        "pricing_model": "ADJUSTMENT",
    },
    "exact_size": {
        "name": "Exact Size",
        "pricing_model": "ADJUSTMENT",
    },
    "qr_code": {
        "name": "QR Code",
        "pricing_model": "FLAT",
        "flat_price": 5.00,
    },
    "rounded_corners": {
        "name": "Rounded Corners",
        "pricing_model": "FLAT",
        "flat_price": 15.00,
    },
    "foil_stamping": {
        "name": "Foil Stamping",
        "pricing_model": "PERCENTAGE",
        "percentage": 25.0,
        "applies_to": "base_price",
    },
    "spot_uv": {
        "name": "Spot UV",
        "pricing_model": "PERCENTAGE",
        "percentage": 20.0,
        "applies_to": "after_turnaround",
    },
    "perforation": {
        "name": "Perforation",
        "pricing_model": "PER_UNIT",
        "setup_fee": 20.00,
        "price_per_unit": 0.01,
        "unit_type": "piece",
    },
    "numbering": {
        "name": "Numbering",
        "pricing_model": "PER_UNIT",
        "setup_fee": 0.0,
        "price_per_unit": 0.10,
        "unit_type": "piece",
    },
    "folding": {
        "name": "Folding",
        "pricing_model": "CUSTOM",
        "text_paper_price": 0.17,
        "text_paper_per_piece": 0.01,
        "card_stock_price": 0.34,
        "card_stock_per_piece": 0.02,
    },
    "banding": {
        "name": "Banding",
        "pricing_model": "CUSTOM",
        "price_per_unit": 0.75,
        "units_per_bundle": 100,
    },
    "eddm_process": {
        "name": "EDDM Process & Postage",
        "pricing_model": "TIERED",
        "tiers": [
            {"min_quantity": 1, "max_quantity": 999, "price": 50.00, "price_per_unit": 0.239},
            {"min_quantity": 1000, "max_quantity": 4999, "price": 50.00, "price_per_unit": 0.219},
            {"min_quantity": 5000, "max_quantity": None, "price": 75.00, "price_per_unit": 0.199},
        ],
    },
}
