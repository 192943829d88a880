from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

OfferType = Literal["claim", "donation", "purchase"]

# top-level keys of the persisted document, in write order
COLLECTIONS = ("users", "items", "donations", "offers")


def iso_now(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision and a trailing Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ItemTemplate:
    name: str
    category: str
    shelf_life_days: int


@dataclass
class Prediction:
    name: str
    category: str
    shelf_life_days: int
    confidence: float
    estimated_expiry: str      # ISO-8601, now + shelf life

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "shelfLifeDays": self.shelf_life_days,
            "confidence": self.confidence,
            "estimatedExpiry": self.estimated_expiry,
        }


def _record_id(raw: Any) -> str:
    if not isinstance(raw, dict):
        raise ValueError(f"record is a {type(raw).__name__}, not an object")
    rid = raw.get("id")
    if rid is None or isinstance(rid, (dict, list)) or str(rid) == "":
        raise ValueError("record has no usable id")
    return str(rid)


def _text(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        raise ValueError(f"{key} is not a scalar")
    return str(value)


def _meta(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    value = raw.get("meta")
    if value is not None and not isinstance(value, dict):
        raise ValueError("meta is not an object")
    return value


@dataclass
class Item:
    id: str
    owner_id: Optional[str]
    name: Optional[str]
    category: Optional[str]
    estimated_expiry: Optional[str]
    created_at: Optional[str]
    meta: Optional[Dict[str, Any]] = None
    # fields written by someone else, kept on rewrite
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.extra)
        out.update({
            "id": self.id,
            "ownerId": self.owner_id,
            "name": self.name,
            "category": self.category,
            "estimatedExpiry": self.estimated_expiry,
        })
        # meta only appears when the caller sent it
        if self.meta is not None:
            out["meta"] = self.meta
        if self.created_at is not None:
            out["createdAt"] = self.created_at
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Item":
        """Raises ValueError when the record cannot be read."""
        return cls(
            id=_record_id(raw),
            owner_id=_text(raw, "ownerId"),
            name=_text(raw, "name"),
            category=_text(raw, "category"),
            estimated_expiry=_text(raw, "estimatedExpiry"),
            created_at=_text(raw, "createdAt"),
            meta=_meta(raw),
            extra={k: v for k, v in raw.items() if k not in _ITEM_KEYS},
        )


_ITEM_KEYS = ("id", "ownerId", "name", "category", "estimatedExpiry", "createdAt", "meta")


@dataclass
class Offer:
    id: str
    item_id: Optional[str]
    type: Optional[str]
    actor_id: Optional[str]
    ts: Optional[str]
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.extra)
        out.update({
            "id": self.id,
            "itemId": self.item_id,
            "type": self.type,
            "actorId": self.actor_id,
        })
        if self.ts is not None:
            out["ts"] = self.ts
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Offer":
        return cls(
            id=_record_id(raw),
            item_id=_text(raw, "itemId"),
            type=_text(raw, "type"),
            actor_id=_text(raw, "actorId"),
            ts=_text(raw, "ts"),
            extra={k: v for k, v in raw.items() if k not in _OFFER_KEYS},
        )


_OFFER_KEYS = ("id", "itemId", "type", "actorId", "ts")


def _parse(records, parse, unreadable: list) -> list:
    out = []
    for raw in records:
        try:
            out.append(parse(raw))
        except ValueError:
            unreadable.append(raw)
    return out


@dataclass
class StoreRoot:
    users: List[Dict[str, Any]] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    donations: List[Dict[str, Any]] = field(default_factory=list)
    offers: List[Offer] = field(default_factory=list)
    # unknown top-level keys survive a rewrite
    extra: Dict[str, Any] = field(default_factory=dict)
    # records that could not be read; not listed, written back as they were
    unreadable_items: List[Any] = field(default_factory=list)
    unreadable_offers: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        doc = {
            "users": list(self.users),
            "items": [i.to_dict() for i in self.items] + list(self.unreadable_items),
            "donations": list(self.donations),
            "offers": [o.to_dict() for o in self.offers] + list(self.unreadable_offers),
        }
        doc.update(self.extra)
        return doc

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "StoreRoot":
        raw = raw or {}
        bad_items: List[Any] = []
        bad_offers: List[Any] = []
        return cls(
            users=list(raw.get("users") or []),
            items=_parse(raw.get("items") or [], Item.from_dict, bad_items),
            donations=list(raw.get("donations") or []),
            offers=_parse(raw.get("offers") or [], Offer.from_dict, bad_offers),
            extra={k: v for k, v in raw.items() if k not in COLLECTIONS},
            unreadable_items=bad_items,
            unreadable_offers=bad_offers,
        )
