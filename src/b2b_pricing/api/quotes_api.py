"""
Quotes API - FastAPI router for the request-for-quote workflow.
"""
from fastapi import APIRouter, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional

from ..services.quotes_service import (
    QuoteStatus,
    QuoteNotFoundError,
    QuoteTransitionError,
    QuoteValidationError,
    quote_total,
)
from .state import state

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


class QuoteItemIn(BaseModel):
    product_id: str
    name: str
    sku: Optional[str] = None
    price: float
    image: Optional[str] = None
    quantity: int


class QuoteCreate(BaseModel):
    """Storefront quote submission."""
    name: str = ""
    email: str = ""
    contact: str = ""
    company_name: Optional[str] = None
    remark: Optional[str] = None
    expected_price: Optional[float] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    items: list[QuoteItemIn] = []


class StatusUpdate(BaseModel):
    status: QuoteStatus


def _quote_out(quote) -> dict:
    data = quote.to_dict()
    data['item_count'] = quote.item_count
    data['total'] = quote_total(quote, state.engine)
    return data


@router.post("")
async def create_quote(payload: QuoteCreate):
    """Submit a quote request."""
    try:
        quote = state.quotes_service.create_quote(payload.model_dump())
    except QuoteValidationError as e:
        return JSONResponse(status_code=422, content={"errors": e.errors})

    return {"success": True, "quote_number": quote.quote_number, "id": quote.id}


@router.get("")
async def list_quotes(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    search: str = "",
    status: Optional[QuoteStatus] = None,
):
    """Admin listing with search, status filter and pagination."""
    listing = state.quotes_service.list_quotes(page=page, limit=limit, search=search, status=status)
    return jsonable_encoder({
        "quotes": [_quote_out(q) for q in listing['quotes']],
        "pagination": listing['pagination'],
    })


@router.get("/stats")
async def get_stats():
    return state.quotes_service.get_stats()


@router.get("/number/{quote_number}")
async def get_quote_by_number(quote_number: str):
    quote = state.quotes_service.get_quote_by_number(quote_number)
    if not quote:
        raise HTTPException(status_code=404, detail=f"Quote '{quote_number}' not found")
    return _quote_out(quote)


@router.get("/{quote_id}")
async def get_quote(quote_id: str):
    quote = state.quotes_service.get_quote(quote_id)
    if not quote:
        raise HTTPException(status_code=404, detail=f"Quote '{quote_id}' not found")
    return _quote_out(quote)


@router.patch("/{quote_id}/status")
async def update_status(quote_id: str, update: StatusUpdate):
    """Move a quote along its status lifecycle."""
    try:
        quote = state.quotes_service.update_status(quote_id, update.status)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QuoteTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"success": True, "status": quote.status.value}


@router.delete("/{quote_id}")
async def delete_quote(quote_id: str):
    try:
        state.quotes_service.delete_quote(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"success": True, "message": f"Quote '{quote_id}' deleted"}
