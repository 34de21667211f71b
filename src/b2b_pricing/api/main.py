import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Dict

from ..engine import Request
from .quotes_api import router as quotes_router
from .tiers_api import router as tiers_router
from .state import state

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="B2B Pricing API",
    description="Tiered quantity pricing and request-for-quote backend",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tiers_router)
app.include_router(quotes_router)


class CalcRequest(BaseModel):
    items: Dict[str, int]


@app.get("/")
async def root():
    return {"status": "online", "message": "B2B Pricing API Active"}


@app.post("/calculate")
async def calculate(req: CalcRequest):
    result = state.engine.calculate(Request(items=req.items))
    return jsonable_encoder(result)


@app.get("/products/{product_id}/price")
async def get_product_price(product_id: str, quantity: int = Query(1, ge=1)):
    try:
        price = state.engine.price_product(product_id, quantity)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    return jsonable_encoder(price)


@app.get("/system/status")
async def get_status():
    settings = state.settings
    return {
        "engine_active": True,
        "products_count": len(state.engine.catalog),
        "tier_tables": state.tiers_service.get_stats()['products_with_tiers'],
        "quotes": state.quotes_service.get_stats()['total'],
        "data_dir": str(settings.data_dir),
    }
