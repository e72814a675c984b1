from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ...retrieval import TravelChatEngine
from ...retrieval.flights import normalize_trip_type
from ...schemas import FlightEstimateResponse, PriceBand
from .chat import get_engine

router = APIRouter(tags=["flights"])

REFERENCE_PRICE_NOTE = (
    "Đây chỉ là giá tham khảo, giá thực tế có thể thay đổi theo thời điểm đặt vé, "
    "hãng bay và khuyến mãi."
)
NO_ESTIMATE_NOTE = (
    "Chưa có dữ liệu ước lượng cho chặng bay này. Vui lòng kiểm tra trực tiếp trên các "
    "ứng dụng đặt vé (Traveloka, Skyscanner, v.v.)."
)


@router.get("/api/flights/estimate-local", response_model=FlightEstimateResponse)
async def estimate_local(
    origin: str | None = Query(None, description="Origin airport code, e.g. SGN"),
    destination: str | None = Query(None, description="Destination airport code, e.g. DAD"),
    trip_type: str | None = Query(None, alias="tripType"),
    engine: TravelChatEngine = Depends(get_engine),
) -> FlightEstimateResponse:
    if not origin or not origin.strip() or not destination or not destination.strip():
        raise HTTPException(
            status_code=400,
            detail="origin and destination are required (e.g. origin=SGN&destination=DAD)",
        )
    quote = engine.corpora.flights.quote(origin, destination, trip_type)
    if quote is None:
        return FlightEstimateResponse(
            route=f"{origin.strip().upper()}-{destination.strip().upper()}",
            trip_type=normalize_trip_type(trip_type),
            estimates=None,
            note=NO_ESTIMATE_NOTE,
        )
    note = f"{quote.note} {REFERENCE_PRICE_NOTE}".strip()
    return FlightEstimateResponse(
        route=quote.route,
        origin_name=quote.origin_name,
        destination_name=quote.destination_name,
        currency=quote.currency,
        trip_type=quote.trip_type,
        low=quote.low,
        high=quote.high,
        estimates=PriceBand(low=quote.low, high=quote.high),
        note=note,
    )
