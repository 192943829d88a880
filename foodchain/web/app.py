from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse

from foodchain.services.api import create_app
from foodchain.services.settings import Settings


def attach_client(app: FastAPI, dist: Path) -> None:
    """Serve the client build; unknown non-API paths get index.html (SPA fallback).

    Registered after the API routes, so it only sees paths nothing else matched.
    """
    dist = dist.resolve()
    index = dist / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    def client(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            return JSONResponse({"error": "not found"}, status_code=404)
        if full_path:
            candidate = (dist / full_path).resolve()
            if candidate.is_file() and dist in candidate.parents:
                return FileResponse(candidate)
        if not index.is_file():
            return JSONResponse({"error": "client build has no index.html"}, status_code=503)
        return FileResponse(index)


def create_web_app(settings: Optional[Settings] = None, **collaborators) -> FastAPI:
    settings = settings or Settings.from_env()
    app = create_app(settings, **collaborators)
    status = app.state.status

    dist = Path(settings.client_dist)
    if dist.is_dir():
        attach_client(app, dist)
        status.log(f"web: serving client from {dist.resolve()}")
    else:
        status.log(f"web: no client build at {dist}, API only")
    return app
