import base64
import binascii
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from foodchain.services.models import (
    RecognizeRequest, RecognizeResponse, PredictionOut,
    ItemCreate, ItemOut, ItemResponse, ItemListResponse,
    OfferCreate, OfferOut, OfferResponse, OfferListResponse,
    PingResponse, HealthResponse, StatusResponse,
)
from foodchain.services.settings import Settings
from foodchain.services.status_store import StatusStore
from foodchain.adapters.store.base import CatalogStore
from foodchain.adapters.vision.base import VisionAdapter
from foodchain.orchestrator import errors


def build_store(settings: Settings, status: StatusStore) -> CatalogStore:
    # Store adapter: STORE_ADAPTER env var (default: json)
    if settings.store_adapter == "memory":
        from foodchain.adapters.store.memory_store import MemoryStore
        store = MemoryStore(status)
    else:
        if settings.store_adapter != "json":
            status.log(f"store: unknown adapter {settings.store_adapter!r}, using json")
        from foodchain.adapters.store.json_store import JsonFileStore
        store = JsonFileStore(status, settings.db_path)
    store.load()
    status.log(f"store adapter: {type(store).__name__}")
    return store


def build_vision(settings: Settings, status: StatusStore) -> VisionAdapter:
    # Only the mock exists; anything else falls back to it
    from foodchain.adapters.vision.mock_vision import MockVision
    if settings.vision_adapter != "mock":
        status.log(f"vision: unknown adapter {settings.vision_adapter!r}, falling back to mock")
    vision = MockVision(status)
    status.log(f"vision adapter: {type(vision).__name__}")
    return vision


def _decode_image(data: str) -> Optional[bytes]:
    """Bytes of a data URL or bare base64 string; None if it does not decode."""
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data)
    except (binascii.Error, ValueError):
        return None


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CatalogStore] = None,
    vision: Optional[VisionAdapter] = None,
    status: Optional[StatusStore] = None,
) -> FastAPI:
    """Build the catalog API. Collaborators not passed in are built from settings."""
    settings = settings or Settings.from_env()
    status = status or StatusStore(log_level=settings.log_level)
    store = store or build_store(settings, status)
    vision = vision or build_vision(settings, status)

    app = FastAPI(title="foodchain catalog API")
    app.state.settings = settings
    app.state.status = status
    app.state.store = store
    app.state.vision = vision

    origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _render(request: Request, exc: errors.CatalogError) -> JSONResponse:
        status.log(f"{exc.code} {request.method} {request.url.path}: {exc.message}")
        body = {"error": exc.message}
        if getattr(exc, "details", None):
            body["details"] = exc.details
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(errors.CatalogError)
    async def catalog_error(request: Request, exc: errors.CatalogError):
        return _render(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException):
        # unmatched routes and wrong methods, in the same {error} shape
        message = exc.detail.lower() if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse({"error": message}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        details = [
            {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        first = details[0] if details else {"loc": [], "msg": "invalid request"}
        where = ".".join(p for p in first["loc"] if p != "body")
        message = f"{where}: {first['msg']}" if where else first["msg"]
        return _render(request, errors.ValidationError(message, details))

    @app.get("/api/ping", response_model=PingResponse)
    def ping():
        return PingResponse(ok=True, ts=int(time.time() * 1000))

    @app.post("/api/recognize", response_model=RecognizeResponse)
    def recognize(req: Optional[RecognizeRequest] = None):
        if req is None or not req.imageBase64:
            raise errors.MissingInputError("no image")
        image_bytes = _decode_image(req.imageBase64)
        if image_bytes is None:
            status.log("RECOGNIZE: image is not valid base64, ignoring it")
        p = vision.identify(image_bytes)
        return RecognizeResponse(ok=True, prediction=PredictionOut(**p.to_dict()))

    @app.post("/api/items", response_model=ItemResponse, response_model_exclude_unset=True)
    def create_item(req: ItemCreate):
        item = store.create_item(
            owner_id=req.ownerId,
            name=req.name,
            category=req.category,
            estimated_expiry=req.estimatedExpiry,
            meta=req.meta,
        )
        return ItemResponse(ok=True, item=ItemOut(**item.to_dict()))

    def _list_items():
        items = [ItemOut(**i.to_dict()) for i in store.list_items()]
        return ItemListResponse(ok=True, items=items)

    @app.get("/api/items", response_model=ItemListResponse, response_model_exclude_unset=True)
    def list_items():
        return _list_items()

    @app.get("/api/items/nearby", response_model=ItemListResponse, response_model_exclude_unset=True)
    def list_items_nearby():
        """Same as /api/items: there is no location data to filter on."""
        return _list_items()

    @app.post("/api/offers", response_model=OfferResponse)
    def create_offer(req: OfferCreate):
        if settings.check_offer_item and store.get_item(req.itemId) is None:
            raise errors.ItemNotFoundError("item not found")
        offer = store.create_offer(item_id=req.itemId, offer_type=req.type, actor_id=req.actorId)
        return OfferResponse(ok=True, offer=OfferOut(**offer.to_dict()))

    @app.get("/api/offers", response_model=OfferListResponse)
    def list_offers():
        return OfferListResponse(ok=True, offers=[OfferOut(**o.to_dict()) for o in store.list_offers()])

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            ok=True,
            store=type(store).__name__,
            vision=type(vision).__name__,
            items=len(store.list_items()),
            offers=len(store.list_offers()),
        )

    @app.get("/api/status", response_model=StatusResponse)
    def get_status():
        return StatusResponse(ok=True, logs=list(status.logs))

    return app
