"""FastAPI application serving rendered MOC documents."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..builder.moc import folder_heading_text
from ..config import parse_index_spec


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with repository and config
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="mocgen API",
        description="Map-of-Content rendering for a markdown vault",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/moc", response_class=PlainTextResponse)
    async def moc(
        folder: list[str] | None = Query(None, description="Folder prefixes (default: config)"),
        index: list[str] | None = Query(None, description="FIELD[:LABEL] index specs"),
        auth: None = Depends(verify_token),
    ) -> str:
        """Rendered MOC markdown."""
        folders = folder or runtime.config.moc.folders
        if not folders:
            raise HTTPException(status_code=400, detail="No folders configured")
        try:
            indices = [parse_index_spec(i).to_spec() for i in index] if index else None
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return runtime.render(folders, indices)

    @app.get("/pages")
    async def pages(
        folder: str = Query(..., description="Folder prefix"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Pages of one folder, newest first, with their derived fields."""
        builder = runtime.builder()
        return {
            "folder": folder,
            "heading": folder_heading_text(folder),
            "pages": [
                {
                    "path": p.path,
                    "basename": p.basename,
                    "title": p.meta.get("title"),
                    "ctime": p.ctime,
                    "tags": p.formula.tags,
                    "categories": p.formula.categories,
                    "image": p.formula.image,
                }
                for p in builder.build_pages(folder)
            ],
        }

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
