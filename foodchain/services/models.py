from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from foodchain.orchestrator.contracts import OfferType


class RecognizeRequest(BaseModel):
    imageBase64: Optional[str] = None  # data URL or bare base64; decoded, never analysed


class PredictionOut(BaseModel):
    name: str
    category: str
    shelfLifeDays: int
    confidence: float
    estimatedExpiry: str


class RecognizeResponse(BaseModel):
    ok: bool
    prediction: PredictionOut


class ItemCreate(BaseModel):
    ownerId: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    estimatedExpiry: str
    meta: Optional[Dict[str, Any]] = None

    @field_validator("estimatedExpiry")
    @classmethod
    def _iso_timestamp(cls, v: str) -> str:
        # keep the caller's string, only check that it parses
        raw = v.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError("estimatedExpiry must be an ISO-8601 timestamp")
        return v


class ItemOut(BaseModel):
    id: str
    ownerId: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    estimatedExpiry: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    createdAt: Optional[str] = None


class ItemResponse(BaseModel):
    ok: bool
    item: ItemOut


class ItemListResponse(BaseModel):
    ok: bool
    items: list[ItemOut]


class OfferCreate(BaseModel):
    itemId: str = Field(min_length=1)
    type: OfferType
    actorId: str = Field(min_length=1)


class OfferOut(BaseModel):
    id: str
    itemId: Optional[str] = None
    type: Optional[str] = None   # legacy records may hold any string
    actorId: Optional[str] = None
    ts: Optional[str] = None


class OfferResponse(BaseModel):
    ok: bool
    offer: OfferOut


class OfferListResponse(BaseModel):
    ok: bool
    offers: list[OfferOut]


class PingResponse(BaseModel):
    ok: bool
    ts: int   # epoch ms


class HealthResponse(BaseModel):
    ok: bool
    store: str
    vision: str
    items: int
    offers: int


class StatusResponse(BaseModel):
    ok: bool
    logs: list[str]
