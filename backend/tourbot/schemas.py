from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_MESSAGE_LENGTH = 4000


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    session_id: str | None = Field(None, alias="sessionId", max_length=128)
    origin: str | None = Field(None, max_length=8, description="Origin airport code, e.g. SGN")
    destination: str | None = Field(None, max_length=8, description="Destination airport code")
    trip_type: str | None = Field(None, alias="tripType", description="oneway or roundtrip")

    @field_validator("message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    session_id: str = Field(..., alias="sessionId")
    intent: str
    active_location: str | None = Field(None, alias="activeLocation")


class PriceBand(BaseModel):
    low: float | None = None
    high: float | None = None


class FlightEstimateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    route: str
    origin_name: str | None = Field(None, alias="from")
    destination_name: str | None = Field(None, alias="to")
    currency: str | None = None
    trip_type: str | None = Field(None, alias="type")
    low: float | None = None
    high: float | None = None
    estimates: PriceBand | None = None
    note: str
