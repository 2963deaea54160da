"""
JSON API for the desktop front-end.

Run with:  uvicorn --factory passkeep.web:create_app
"""
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from passkeep.core.clock import Clock
from passkeep.core.config import DB_PATH, LOG_PATH
from passkeep.core.db import create_db_engine, create_session_factory, init_db, run_migrations
from passkeep.core.entry import CredentialDraft, CredentialEntry
from passkeep.core.errors import (
    DuplicateEntryError,
    EntryNotFoundError,
    GenerationError,
    PersistenceError,
    ValidationError,
)
from passkeep.core.ids import IdentifierGenerator
from passkeep.core.logging import logger, setup_logger
from passkeep.core.passwords import DEFAULT_LENGTH, generate_password
from passkeep.core.repository import SqlEntryRepository
from passkeep.core.service import EntryService


# -----------------------------
# Schemas
# -----------------------------
class EntryIn(BaseModel):
    # left optional so missing fields reach the entry validator,
    # which reports them by name
    title: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None

    def to_draft(self) -> CredentialDraft:
        return CredentialDraft.from_dict(self.model_dump())


class EntryOut(BaseModel):
    id: str
    title: str
    username: str
    password: str
    website: Optional[str]
    email: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_entry(cls, e: CredentialEntry) -> "EntryOut":
        return cls(**e.to_dict())


# -----------------------------
# Helpers
# -----------------------------
def get_client_ip(request: Request) -> str:
    client = request.client
    return client.host if client else "unknown"


def get_service(request: Request):
    state = request.app.state
    db = state.session_factory()
    try:
        yield EntryService(SqlEntryRepository(db), state.ids, state.clock)
    finally:
        db.close()


# -----------------------------
# Error mapping
# -----------------------------
def _install_error_handlers(app: FastAPI):
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(
            "Entry rejected field=%s reason=%s ip=%s",
            exc.field,
            exc.message,
            get_client_ip(request),
        )
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "field": exc.field},
        )

    @app.exception_handler(EntryNotFoundError)
    async def not_found_handler(request: Request, exc: EntryNotFoundError):
        logger.warning("Entry not found entry_id=%s ip=%s", exc.entry_id, get_client_ip(request))
        return JSONResponse(status_code=404, content={"detail": "Not found"})

    @app.exception_handler(DuplicateEntryError)
    async def duplicate_handler(request: Request, exc: DuplicateEntryError):
        logger.error("Duplicate entry id entry_id=%s", exc.entry_id)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("Storage failure: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Storage failure"})

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError):
        logger.critical("Generator failure: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})


def create_app(
    db_path: str = DB_PATH,
    log_path: str = LOG_PATH,
    ids: Optional[IdentifierGenerator] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    app = FastAPI(title="PassKeep")

    engine = create_db_engine(db_path)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    # one clock for the whole app so timestamps never run backwards
    # across requests
    app.state.ids = ids or IdentifierGenerator()
    app.state.clock = clock or Clock()

    _install_error_handlers(app)

    # Security headers
    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)

        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "object-src 'none'; "
            "base-uri 'none'; "
            "frame-ancestors 'none';"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"

        return response

    # -----------------------------
    # Generators
    # -----------------------------
    @app.get("/api/id")
    def generate_id_api(service: EntryService = Depends(get_service)):
        return {"id": service.generate_id()}

    @app.get("/api/time")
    def current_time_api(service: EntryService = Depends(get_service)):
        return {"time": service.get_current_time()}

    @app.get("/api/password")
    def generate_password_api(length: int = Query(DEFAULT_LENGTH, ge=1, le=256)):
        return {"password": generate_password(length)}

    # -----------------------------
    # Entry endpoints
    # -----------------------------
    @app.get("/api/entries", response_model=list[EntryOut])
    def list_entries_api(
        search: Optional[str] = None,
        sort: Literal["title", "username", "created_at", "updated_at"] = "created_at",
        order: Literal["asc", "desc"] = "desc",
        service: EntryService = Depends(get_service),
    ):
        return [EntryOut.from_entry(e) for e in service.list_entries(search, sort, order)]

    @app.post("/api/entries", response_model=EntryOut, status_code=201)
    def create_entry_api(
        data: EntryIn,
        request: Request,
        service: EntryService = Depends(get_service),
    ):
        e = service.create_entry(data.to_draft())
        logger.info("Entry created via api entry_id=%s ip=%s", e.id, get_client_ip(request))
        return EntryOut.from_entry(e)

    @app.get("/api/entries/{entry_id}", response_model=EntryOut)
    def get_entry_api(
        entry_id: str,
        request: Request,
        service: EntryService = Depends(get_service),
    ):
        e = service.get_entry(entry_id)
        if not e:
            logger.warning("Entry not found entry_id=%s ip=%s", entry_id, get_client_ip(request))
            raise HTTPException(404, "Not found")

        logger.info("Entry viewed entry_id=%s ip=%s", entry_id, get_client_ip(request))
        return EntryOut.from_entry(e)

    @app.put("/api/entries/{entry_id}", response_model=EntryOut)
    def edit_entry_api(
        entry_id: str,
        data: EntryIn,
        service: EntryService = Depends(get_service),
    ):
        return EntryOut.from_entry(service.edit_entry(entry_id, data.to_draft()))

    @app.delete("/api/entries/{entry_id}", status_code=204)
    def delete_entry_api(
        entry_id: str,
        service: EntryService = Depends(get_service),
    ):
        service.delete_entry(entry_id)
        # FastAPI with status_code=204 expects an empty response
        return Response(status_code=204)

    # -----------------------------
    # Startup
    # -----------------------------
    @app.on_event("startup")
    def startup():
        setup_logger(log_path)
        init_db(engine)
        db = app.state.session_factory()
        try:
            run_migrations(db)
        finally:
            db.close()

    return app
