"""
Tiers API - FastAPI router for tier table management.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Optional

from ..engine.models import PriceTier
from ..services.tiers_service import TierValidationError
from .state import state

router = APIRouter(prefix="/api/tiers", tags=["tiers"])


# Pydantic models for API
class TierIn(BaseModel):
    """One band of a proposed tier table."""
    min_quantity: int
    max_quantity: Optional[int] = None
    unit_price: float


class TierOut(BaseModel):
    min_quantity: int
    max_quantity: Optional[int]
    unit_price: float
    sort_order: int
    label: str


class TierTableIn(BaseModel):
    tiers: list[TierIn] = Field(default_factory=list)


class TierTableOut(BaseModel):
    product_id: str
    tiers: list[TierOut]


class ValidationResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None


def _to_tiers(payload: TierTableIn) -> list[PriceTier]:
    return [
        PriceTier(
            min_quantity=t.min_quantity,
            max_quantity=t.max_quantity,
            unit_price=t.unit_price,
            sort_order=i,
        )
        for i, t in enumerate(payload.tiers)
    ]


def _table_out(product_id: str, tiers: list[PriceTier]) -> TierTableOut:
    return TierTableOut(
        product_id=product_id,
        tiers=[
            TierOut(
                min_quantity=t.min_quantity,
                max_quantity=t.max_quantity,
                unit_price=t.unit_price,
                sort_order=t.sort_order,
                label=t.label(),
            )
            for t in tiers
        ],
    )


# Endpoints

@router.get("/stats")
async def get_stats():
    """Get tier table statistics."""
    return state.tiers_service.get_stats()


@router.post("/validate", response_model=ValidationResponse)
async def validate_tiers(payload: TierTableIn):
    """Validate a tier table without saving."""
    result = state.tiers_service.validate(_to_tiers(payload))
    return ValidationResponse(valid=result.valid, reason=result.reason)


@router.get("/{product_id}", response_model=TierTableOut)
async def get_tiers(product_id: str):
    """Get a product's tier table."""
    return _table_out(product_id, state.tiers_service.list_tiers(product_id))


@router.put("/{product_id}", response_model=TierTableOut)
async def replace_tiers(product_id: str, payload: TierTableIn):
    """Replace a product's tier table and reload the engine."""
    try:
        saved = state.tiers_service.replace_tiers(product_id, _to_tiers(payload))
    except TierValidationError as e:
        raise HTTPException(status_code=400, detail={"reason": e.reason})

    state.engine.reload_data()
    return _table_out(product_id, saved)


@router.delete("/{product_id}")
async def delete_tiers(product_id: str):
    """Clear a product's tier table."""
    if not state.tiers_service.delete_tiers(product_id):
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' has no tier table")

    state.engine.reload_data()
    return {"success": True, "message": f"Tier table for '{product_id}' deleted"}
