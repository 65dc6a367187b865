import os
import time
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import catalog
import pricing_config as cfg
from catalog import PaperException, ProductPricingConfig, StandardQuantity, StandardSize
from pricing_engine import AddonSelection, QuoteInputs, calculate_quote, format_breakdown
from quantity_transformer import (
    QuantityGroup,
    find_default_quantity,
    transform_quantity_group,
    validate_custom_quantity,
)

# DB (Postgres in production, SQLite locally)
from sqlalchemy import Boolean, Column, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


# ----------------------------
# App + config
# ----------------------------
app = FastAPI(title="Print Pricing API", version="1.0.0")

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.environ.get("ALLOWED_ORIGINS", "http://localhost:8501").split(",")
    if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Optional API key protection for write endpoints
API_KEY = os.environ.get("API_KEY", "")

# Listing responses are cached briefly; every write clears the cache
CATALOG_CACHE_TTL_SECONDS = int(os.environ.get("CATALOG_CACHE_TTL_SECONDS", "300"))

# DB config
DATABASE_URL = os.environ.get("DATABASE_URL", "")
Base = declarative_base()
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args) if DATABASE_URL else None
SessionLocal = sessionmaker(bind=engine) if engine else None


# ----------------------------
# DB Models
# ----------------------------
class StandardSizeRow(Base):
    __tablename__ = "standard_sizes"

    name = Column(String, primary_key=True)
    display_name = Column(String, nullable=False)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    pre_calculated_value = Column(Float, nullable=False)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)


class StandardQuantityRow(Base):
    __tablename__ = "standard_quantities"

    display_value = Column(Integer, primary_key=True)
    calculation_value = Column(Integer, nullable=False)
    adjustment_value = Column(Integer, nullable=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)


class PaperExceptionRow(Base):
    __tablename__ = "paper_exceptions"

    paper_stock_id = Column(String, primary_key=True)
    exception_type = Column(String, nullable=False, default=cfg.TEXT_PAPER)
    double_sided_multiplier = Column(Float, nullable=False, default=cfg.TEXT_PAPER_DOUBLE_SIDED_MULTIPLIER)
    description = Column(Text, nullable=True)


class ProductPricingConfigRow(Base):
    __tablename__ = "product_pricing_configs"

    product_id = Column(String, primary_key=True)
    allow_custom_size = Column(Boolean, default=True)
    allow_custom_quantity = Column(Boolean, default=True)
    min_custom_width = Column(Float, default=1.0)
    max_custom_width = Column(Float, default=48.0)
    min_custom_height = Column(Float, default=1.0)
    max_custom_height = Column(Float, default=48.0)
    min_custom_quantity = Column(Integer, default=1)
    max_custom_quantity = Column(Integer, default=1_000_000)


class QuantityGroupRow(Base):
    __tablename__ = "quantity_groups"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    values = Column(Text, nullable=True)  # "100,250,500,custom"
    default_value = Column(String, nullable=True)
    custom_min = Column(Integer, nullable=True)
    custom_max = Column(Integer, nullable=True)
    sort_order = Column(Integer, default=0)


def init_db() -> None:
    if engine:
        Base.metadata.create_all(bind=engine)


init_db()


# ----------------------------
# Row -> record
# ----------------------------
def _size(r: StandardSizeRow) -> StandardSize:
    return StandardSize(
        name=r.name,
        display_name=r.display_name,
        width=r.width,
        height=r.height,
        pre_calculated_value=r.pre_calculated_value,
        sort_order=r.sort_order or 0,
        is_active=bool(r.is_active),
    )


def _quantity(r: StandardQuantityRow) -> StandardQuantity:
    return StandardQuantity(
        display_value=r.display_value,
        calculation_value=r.calculation_value,
        sort_order=r.sort_order or 0,
        adjustment_value=r.adjustment_value,
        is_active=bool(r.is_active),
    )


def _paper_exception(r: PaperExceptionRow) -> PaperException:
    return PaperException(
        paper_stock_id=r.paper_stock_id,
        exception_type=r.exception_type,
        double_sided_multiplier=r.double_sided_multiplier,
        description=r.description or "",
    )


def _pricing_config(r: ProductPricingConfigRow) -> ProductPricingConfig:
    return ProductPricingConfig(
        product_id=r.product_id,
        allow_custom_size=bool(r.allow_custom_size),
        allow_custom_quantity=bool(r.allow_custom_quantity),
        min_custom_width=r.min_custom_width,
        max_custom_width=r.max_custom_width,
        min_custom_height=r.min_custom_height,
        max_custom_height=r.max_custom_height,
        min_custom_quantity=r.min_custom_quantity,
        max_custom_quantity=r.max_custom_quantity,
    )


def _group(r: QuantityGroupRow) -> QuantityGroup:
    return QuantityGroup(
        id=r.id,
        values=r.values,
        default_value=r.default_value,
        custom_min=r.custom_min,
        custom_max=r.custom_max,
        name=r.name or "",
    )


# ----------------------------
# Helpers
# ----------------------------
def _require_api_key(x_api_key: Optional[str]) -> None:
    if API_KEY:
        if not x_api_key or x_api_key != API_KEY:
            raise HTTPException(status_code=401, detail="Unauthorized")


def _db_required() -> None:
    if not SessionLocal:
        raise HTTPException(status_code=500, detail="DB not configured (missing DATABASE_URL).")


_cache: Dict[str, Tuple[float, Any]] = {}
# Bumped on every invalidation; a load that straddles a write must not repopulate the cache
_cache_generation = 0


def _cache_get(key: str) -> Optional[Any]:
    hit = _cache.get(key)
    if not hit:
        return None
    stored_at, value = hit
    if time.monotonic() - stored_at > CATALOG_CACHE_TTL_SECONDS:
        _cache.pop(key, None)
        return None
    return value


def _cache_set(key: str, value: Any, generation: int) -> Any:
    if generation == _cache_generation:
        _cache[key] = (time.monotonic(), value)
    return value


def _invalidate_cache() -> None:
    global _cache_generation
    _cache_generation += 1
    if _cache:
        print(f"ℹ️ Clearing {len(_cache)} cached catalog response(s).")
    _cache.clear()


def _load_sizes() -> List[StandardSize]:
    if not SessionLocal:
        return catalog.active_standard_sizes()
    db = SessionLocal()
    try:
        rows = db.query(StandardSizeRow).order_by(StandardSizeRow.sort_order).all()
        return [_size(r) for r in rows]
    finally:
        db.close()


def _load_quantities() -> List[StandardQuantity]:
    if not SessionLocal:
        return catalog.active_standard_quantities()
    db = SessionLocal()
    try:
        rows = db.query(StandardQuantityRow).order_by(StandardQuantityRow.sort_order).all()
        return [_quantity(r) for r in rows]
    finally:
        db.close()


def _load_paper_exceptions() -> List[PaperException]:
    if not SessionLocal:
        return []
    db = SessionLocal()
    try:
        return [_paper_exception(r) for r in db.query(PaperExceptionRow).all()]
    finally:
        db.close()


def _load_pricing_config(product_id: Optional[str], product_name: str = "") -> ProductPricingConfig:
    if product_id and SessionLocal:
        db = SessionLocal()
        try:
            r = db.query(ProductPricingConfigRow).filter(ProductPricingConfigRow.product_id == product_id).first()
            if r:
                return _pricing_config(r)
        finally:
            db.close()
    return catalog.default_pricing_config(product_id or "default", product_name)


def _load_group(group_id: str) -> QuantityGroup:
    _db_required()
    db = SessionLocal()
    try:
        r = db.query(QuantityGroupRow).filter(QuantityGroupRow.id == group_id).first()
        if not r:
            raise HTTPException(status_code=404, detail=f"Quantity group not found: {group_id}")
        return _group(r)
    finally:
        db.close()


# ----------------------------
# Request models
# ----------------------------
class AddonRequest(BaseModel):
    addon_id: str
    units: Optional[int] = None


class QuoteRequest(BaseModel):
    product_id: Optional[str] = None
    product_name: str = ""
    paper_stock_id: str
    paper_price_per_sq_in: float
    paper_type: str = "cardstock"
    sides: str = "single"
    size_selection: str = "standard"
    standard_size: Optional[str] = None
    custom_width: Optional[float] = None
    custom_height: Optional[float] = None
    quantity_selection: str = "standard"
    standard_quantity: Optional[int] = None
    custom_quantity: Optional[int] = None
    turnaround: str = cfg.DEFAULT_TURNAROUND
    addons: List[AddonRequest] = []
    broker_discount_percent: float = 0.0


class QuantityGroupRequest(BaseModel):
    id: str
    name: str = ""
    values: str
    default_value: Optional[str] = None
    custom_min: Optional[int] = None
    custom_max: Optional[int] = None
    sort_order: int = 0


class ValidateQuantityRequest(BaseModel):
    value: float


class PaperExceptionRequest(BaseModel):
    exception_type: str = cfg.TEXT_PAPER
    double_sided_multiplier: float = cfg.TEXT_PAPER_DOUBLE_SIDED_MULTIPLIER
    description: str = ""


class PricingConfigRequest(BaseModel):
    allow_custom_size: bool = True
    allow_custom_quantity: bool = True
    min_custom_width: float = 1.0
    max_custom_width: float = 48.0
    min_custom_height: float = 1.0
    max_custom_height: float = 48.0
    min_custom_quantity: int = 1
    max_custom_quantity: int = 1_000_000


# ----------------------------
# Routes
# ----------------------------
@app.get("/health")
def health():
    return {"ok": True, "db": bool(SessionLocal)}


@app.post("/admin/seed")
def seed_catalog(x_api_key: Optional[str] = Header(default=None)):
    """
    Upsert the active standard sizes/quantities from tuning_knobs and
    deactivate stored rows that are no longer active there.
    Rows that break the catalog rules are skipped and reported.
    """
    _require_api_key(x_api_key)
    _db_required()

    sizes = catalog.active_standard_sizes()
    quantities = catalog.active_standard_quantities()
    rejected: List[str] = []
    seeded_sizes: List[str] = []
    seeded_quantities: List[int] = []

    db = SessionLocal()
    try:
        for s in sizes:
            errors = catalog.check_standard_size(s)
            if errors:
                rejected.extend(errors)
                continue
            db.merge(
                StandardSizeRow(
                    name=s.name,
                    display_name=s.display_name,
                    width=s.width,
                    height=s.height,
                    pre_calculated_value=s.pre_calculated_value,
                    sort_order=s.sort_order,
                    is_active=True,
                )
            )
            seeded_sizes.append(s.name)

        for q in quantities:
            errors = catalog.check_standard_quantity(q)
            if errors:
                rejected.extend(errors)
                continue
            db.merge(
                StandardQuantityRow(
                    display_value=q.display_value,
                    calculation_value=q.calculation_value,
                    adjustment_value=q.adjustment_value,
                    sort_order=q.sort_order,
                    is_active=True,
                )
            )
            seeded_quantities.append(q.display_value)

        # switched off in tuning_knobs (or now rejected) since the last seed
        db.flush()
        deactivated = db.query(StandardSizeRow).filter(
            StandardSizeRow.name.notin_(seeded_sizes), StandardSizeRow.is_active.is_(True)
        ).update({StandardSizeRow.is_active: False}, synchronize_session=False)
        deactivated += db.query(StandardQuantityRow).filter(
            StandardQuantityRow.display_value.notin_(seeded_quantities), StandardQuantityRow.is_active.is_(True)
        ).update({StandardQuantityRow.is_active: False}, synchronize_session=False)

        db.commit()
    finally:
        db.close()

    _invalidate_cache()
    print(
        f"✅ Seeded {len(sizes)} sizes, {len(quantities)} quantities "
        f"({len(rejected)} rejected, {deactivated} deactivated)."
    )
    return {"sizes": len(sizes), "quantities": len(quantities), "rejected": rejected, "deactivated": deactivated}


@app.get("/catalog/sizes")
def list_sizes():
    cached = _cache_get("sizes")
    if cached is not None:
        return cached
    generation = _cache_generation
    sizes = [s.to_dict() for s in _load_sizes() if s.is_active]
    return _cache_set("sizes", {"sizes": sizes}, generation)


@app.get("/catalog/quantities")
def list_quantities():
    cached = _cache_get("quantities")
    if cached is not None:
        return cached
    generation = _cache_generation
    quantities = [q.to_dict() for q in _load_quantities() if q.is_active]
    return _cache_set("quantities", {"quantities": quantities}, generation)


@app.get("/quantity-groups")
def list_quantity_groups():
    _db_required()
    cached = _cache_get("quantity_groups")
    if cached is not None:
        return cached
    generation = _cache_generation

    db = SessionLocal()
    try:
        rows = db.query(QuantityGroupRow).order_by(QuantityGroupRow.sort_order).all()
        groups = [
            {
                "id": r.id,
                "name": r.name,
                "values": r.values,
                "defaultValue": r.default_value,
                "customMin": r.custom_min,
                "customMax": r.custom_max,
            }
            for r in rows
        ]
    finally:
        db.close()
    return _cache_set("quantity_groups", {"groups": groups}, generation)


@app.post("/quantity-groups")
def upsert_quantity_group(req: QuantityGroupRequest, x_api_key: Optional[str] = Header(default=None)):
    """
    Save a quantity group. Label-only tokens (not numeric, not "custom") are
    stored as entered and reported back as warnings.
    """
    _require_api_key(x_api_key)
    _db_required()

    group = QuantityGroup(
        id=req.id,
        values=req.values,
        default_value=req.default_value,
        custom_min=req.custom_min,
        custom_max=req.custom_max,
        name=req.name,
    )
    quantities = transform_quantity_group(group)
    warnings = [
        f"'{q.name}' is not a number; it will be shown as a label only"
        for q in quantities
        if not q.is_custom and q.value is None
    ]
    if req.default_value and find_default_quantity(quantities, req.default_value) is None:
        warnings.append(f"default value '{req.default_value}' does not match any option")

    db = SessionLocal()
    try:
        db.merge(
            QuantityGroupRow(
                id=req.id,
                name=req.name,
                values=req.values,
                default_value=req.default_value,
                custom_min=req.custom_min,
                custom_max=req.custom_max,
                sort_order=req.sort_order,
            )
        )
        db.commit()
    finally:
        db.close()

    _invalidate_cache()
    return {"id": req.id, "options": len(quantities), "warnings": warnings}


@app.get("/quantity-groups/{group_id}/quantities")
def group_quantities(group_id: str):
    group = _load_group(group_id)
    quantities = transform_quantity_group(group)
    default = find_default_quantity(quantities, group.default_value)
    return {
        "quantities": [q.to_dict() for q in quantities],
        "default": default.to_dict() if default else None,
    }


@app.post("/quantity-groups/{group_id}/validate")
def validate_group_quantity(group_id: str, req: ValidateQuantityRequest):
    quantities = transform_quantity_group(_load_group(group_id))
    if not quantities:
        raise HTTPException(status_code=404, detail=f"Quantity group has no options: {group_id}")

    # A group without a custom option validates against its first entry,
    # which reports "not a custom option".
    target = next((q for q in quantities if q.is_custom), quantities[0])
    return validate_custom_quantity(req.value, target).to_dict()


@app.put("/paper-exceptions/{paper_stock_id}")
def upsert_paper_exception(
    paper_stock_id: str,
    req: PaperExceptionRequest,
    x_api_key: Optional[str] = Header(default=None),
):
    _require_api_key(x_api_key)
    _db_required()
    if req.double_sided_multiplier <= 0:
        raise HTTPException(status_code=400, detail="double_sided_multiplier must be greater than 0")

    db = SessionLocal()
    try:
        db.merge(
            PaperExceptionRow(
                paper_stock_id=paper_stock_id,
                exception_type=req.exception_type,
                double_sided_multiplier=req.double_sided_multiplier,
                description=req.description,
            )
        )
        db.commit()
    finally:
        db.close()

    _invalidate_cache()
    return {"paperStockId": paper_stock_id, "exceptionType": req.exception_type,
            "doubleSidedMultiplier": req.double_sided_multiplier}


@app.get("/paper-exceptions/{paper_stock_id}/multiplier")
def paper_multiplier(paper_stock_id: str, sides: str = "double"):
    if sides not in cfg.SIDES:
        raise HTTPException(status_code=400, detail=f"unknown sides: {sides}")
    exceptions = _load_paper_exceptions()
    return {
        "paperStockId": paper_stock_id,
        "sides": sides,
        "multiplier": catalog.sides_multiplier(paper_stock_id, sides, exceptions),
    }


@app.get("/products/{product_id}/pricing-config")
def get_pricing_config(product_id: str, product_name: str = ""):
    return _load_pricing_config(product_id, product_name).to_dict()


@app.put("/products/{product_id}/pricing-config")
def put_pricing_config(
    product_id: str,
    req: PricingConfigRequest,
    x_api_key: Optional[str] = Header(default=None),
):
    _require_api_key(x_api_key)
    _db_required()

    if req.min_custom_quantity > req.max_custom_quantity:
        raise HTTPException(status_code=400, detail="min_custom_quantity is above max_custom_quantity")
    if req.min_custom_width > req.max_custom_width or req.min_custom_height > req.max_custom_height:
        raise HTTPException(status_code=400, detail="custom size minimum is above maximum")

    db = SessionLocal()
    try:
        db.merge(ProductPricingConfigRow(product_id=product_id, **req.model_dump()))
        db.commit()
    finally:
        db.close()

    _invalidate_cache()
    return ProductPricingConfig(product_id=product_id, **req.model_dump()).to_dict()


@app.post("/quote")
def quote(req: QuoteRequest):
    standard_size = None
    if req.size_selection == "standard" and req.standard_size is not None:
        standard_size = catalog.find_standard_size(req.standard_size, _load_sizes())
        if standard_size is None:
            raise HTTPException(status_code=404, detail=f"Standard size not found: {req.standard_size}")

    standard_quantity = None
    if req.quantity_selection == "standard" and req.standard_quantity is not None:
        standard_quantity = catalog.find_standard_quantity(req.standard_quantity, _load_quantities())
        if standard_quantity is None:
            raise HTTPException(status_code=404, detail=f"Standard quantity not found: {req.standard_quantity}")

    inputs = QuoteInputs(
        paper_stock_id=req.paper_stock_id,
        paper_price_per_sq_in=req.paper_price_per_sq_in,
        sides=req.sides,
        size_selection=req.size_selection,
        quantity_selection=req.quantity_selection,
        standard_size=standard_size,
        custom_width=req.custom_width,
        custom_height=req.custom_height,
        standard_quantity=standard_quantity,
        custom_quantity=req.custom_quantity,
        paper_type=req.paper_type,
        turnaround=req.turnaround,
        addons=tuple(AddonSelection(a.addon_id, a.units) for a in req.addons),
        broker_discount_percent=req.broker_discount_percent,
    )

    try:
        result = calculate_quote(
            inputs,
            pricing_config=_load_pricing_config(req.product_id, req.product_name),
            paper_exceptions=_load_paper_exceptions(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["display_breakdown"] = format_breakdown(result)
    return result


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_app:app", host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
