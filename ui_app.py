import os

import pandas as pd
import requests
import streamlit as st

import catalog
import tuning_knobs as knobs
from catalog import PaperException, StandardSize
from pricing_engine import AddonSelection, QuoteInputs, calculate_quote
from quantity_transformer import (
    find_default_quantity,
    get_quantity_display_text,
    transform_quantity_group,
    validate_custom_quantity,
)

# Empty API_BASE means "price locally from tuning_knobs"
API_BASE = os.environ.get("API_BASE", "").rstrip("/")

# Paper stock id -> (label, $/sq in, paper type)
PAPER_STOCKS = {
    "14pt-gloss-cover": ("14pt Gloss Cover (cardstock)", 0.00145833333, "cardstock"),
    "16pt-matte-cover": ("16pt Matte Cover (cardstock)", 0.0017, "cardstock"),
    "100lb-gloss-text": ("100lb Gloss Text", 0.002, "text"),
    "70lb-uncoated-text": ("70lb Uncoated Text", 0.0012, "text"),
}

TEXT_PAPER_EXCEPTIONS = [
    PaperException(pid) for pid, (_, _, ptype) in PAPER_STOCKS.items() if ptype == "text"
]


def _load_catalog():
    """
    Sizes + quantities from the API when configured, else the local catalog.
    The API hides calculation values, so it decides which quantities are
    offered while the local catalog still supplies what they price at.
    """
    sizes = catalog.active_standard_sizes()
    quantities = catalog.active_standard_quantities()
    if not API_BASE:
        return sizes, quantities

    try:
        r = requests.get(f"{API_BASE}/catalog/sizes", timeout=10)
        if r.status_code == 200 and r.json().get("sizes"):
            sizes = [StandardSize.from_dict(d) for d in r.json()["sizes"]]
    except requests.RequestException as e:
        st.warning(f"Could not load sizes from API, using local catalog: {e}")

    try:
        r = requests.get(f"{API_BASE}/catalog/quantities", timeout=10)
        if r.status_code == 200 and r.json().get("quantities"):
            quantities = catalog.quantities_listed(quantities, r.json()["quantities"])
    except requests.RequestException as e:
        st.warning(f"Could not load quantities from API, using local catalog: {e}")
    return sizes, quantities


def _usd(x) -> str:
    if x is None:
        return ""
    return f"${float(x):,.2f}"


st.set_page_config(page_title="Print Instant Quote", layout="centered")
st.title("Print Instant Quote")

product_name = st.selectbox(
    "Product",
    options=["Business Cards", "Postcards", "Flyers", "Brochures", "Posters"],
)
product_id = product_name.lower().replace(" ", "-")
pricing_config = catalog.default_pricing_config(product_id, product_name)

all_sizes, all_quantities = _load_catalog()

# ---- Size ----
product_sizes = [s for s in catalog.sizes_for_product(product_name) if catalog.find_standard_size(s.name, all_sizes)]
size_labels = [s.display_name for s in product_sizes]
if pricing_config.allow_custom_size:
    size_labels.append("Custom size")
size_label = st.selectbox("Size", options=size_labels)

size_selection = "custom" if size_label == "Custom size" else "standard"
standard_size = None
custom_width = custom_height = None
if size_selection == "custom":
    c1, c2 = st.columns(2)
    custom_width = c1.number_input(
        "Width (in)",
        min_value=float(pricing_config.min_custom_width),
        max_value=float(pricing_config.max_custom_width),
        value=4.0,
        step=0.25,
    )
    custom_height = c2.number_input(
        "Height (in)",
        min_value=float(pricing_config.min_custom_height),
        max_value=float(pricing_config.max_custom_height),
        value=6.0,
        step=0.25,
    )
else:
    standard_size = product_sizes[size_labels.index(size_label)]

# ---- Quantity ----
group = catalog.quantity_group_for_product(product_id, product_name, pricing_config)
# only quantities the catalog currently offers
options = [
    q for q in transform_quantity_group(group)
    if q.is_custom or catalog.find_standard_quantity(q.value, all_quantities)
]
if not options:
    st.error("No quantities are available for this product.")
    st.stop()
default = find_default_quantity(options, group.default_value)
chosen = st.selectbox(
    "Quantity",
    options=options,
    index=options.index(default) if default in options else 0,
    format_func=get_quantity_display_text,
)

quantity_selection = "custom" if chosen.is_custom else "standard"
standard_quantity = None
custom_quantity = None
if chosen.is_custom:
    custom_quantity = int(
        st.number_input(
            "Custom quantity",
            min_value=1,
            value=int(chosen.min_value or 1),
            step=1,
        )
    )
    check = validate_custom_quantity(custom_quantity, chosen)
    if not check.is_valid:
        st.error(check.error)
        st.stop()
    st.caption(get_quantity_display_text(chosen, custom_quantity))
else:
    standard_quantity = catalog.find_standard_quantity(chosen.value, all_quantities)

# ---- Paper / sides / turnaround / add-ons ----
paper_stock_id = st.selectbox(
    "Paper",
    options=list(PAPER_STOCKS.keys()),
    format_func=lambda pid: PAPER_STOCKS[pid][0],
)
_, paper_price, paper_type = PAPER_STOCKS[paper_stock_id]

sides = st.radio("Sides", options=["single", "double"], horizontal=True)

turnaround_options = list(knobs.TURNAROUND_MARKUP_PERCENT.keys())
turnaround = st.selectbox(
    "Turnaround",
    options=turnaround_options,
    format_func=lambda t: f"{t.replace('_', ' ').title()} (+{knobs.TURNAROUND_MARKUP_PERCENT[t]}%)",
)

addon_ids = st.multiselect(
    "Add-ons",
    options=list(knobs.ADDONS.keys()),
    format_func=lambda a: knobs.ADDONS[a]["name"],
)

st.divider()
st.subheader("Quote Summary")

inputs = QuoteInputs(
    paper_stock_id=paper_stock_id,
    paper_price_per_sq_in=float(paper_price),
    sides=sides,
    size_selection=size_selection,
    quantity_selection=quantity_selection,
    standard_size=standard_size,
    custom_width=custom_width,
    custom_height=custom_height,
    standard_quantity=standard_quantity,
    custom_quantity=custom_quantity,
    paper_type=paper_type,
    turnaround=turnaround,
    addons=tuple(AddonSelection(a) for a in addon_ids),
)

try:
    result = calculate_quote(inputs, pricing_config=pricing_config, paper_exceptions=TEXT_PAPER_EXCEPTIONS)
except ValueError as e:
    st.error(str(e))
    st.info("Fix the highlighted fields above to see pricing.")
    st.stop()

c1, c2 = st.columns(2)
c1.metric("Unit Price", f"${result['unit_price']:,.4f}")
c2.metric("Total Price", _usd(result["total_price"]))

rows = [
    ("Base price", _usd(result["base_price"])),
    ("Broker discount", _usd(-result["broker_discount"]) if result["broker_discount"] else ""),
    ("Tagline discount", _usd(-result["tagline_discount"]) if result["tagline_discount"] else ""),
    ("Exact size markup", _usd(result["exact_size_markup"]) if result["exact_size_markup"] else ""),
    (f"Turnaround ({result['turnaround_markup_percent']}%)", _usd(result["turnaround_markup"])),
]
rows += [(a["name"], _usd(a["cost"])) for a in result["addons"]]
rows.append(("Total", _usd(result["total_price"])))

st.caption("Price breakdown")
st.dataframe(pd.DataFrame(rows, columns=["Item", "Amount"]), use_container_width=True, hide_index=True)
