from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from continuity.api.dependencies.state import StateHolder
from continuity.api.routes import activities, dashboard, resources, risks, strategies, suggestions
from continuity.core.config import get_settings
from continuity.core.database import StoreUnavailableError, db
from continuity.core.logging import configure_logging, log_error
from continuity.repositories.records import RecordCorruptError, WriteFailedError
from continuity.services import state as state_service

configure_logging()

settings = get_settings()

tags_metadata = [
    {
        "name": "Business Impact Analysis",
        "description": "Business activities with priority, RTO, RPO, MTPD and supporting resources.",
    },
    {
        "name": "Resources",
        "description": "People, IT systems, facilities, equipment and vendors activities depend on.",
    },
    {
        "name": "Risk Assessment",
        "description": "Risk register scored as likelihood × impact on 1-5 scales.",
    },
    {
        "name": "Recovery Strategies",
        "description": "Candidate recovery options per activity, with one selected strategy each.",
    },
    {
        "name": "Dashboard",
        "description": "Derived metrics, risk heatmap and the compliance report.",
    },
    {
        "name": "AI Suggestions",
        "description": "Draft activity analysis from an external text generation service.",
    },
]

app = FastAPI(
    title=settings.app_name,
    description=(
        "Business continuity register for activities, resources, risks and recovery "
        "strategies, with coverage and readiness metrics."
    ),
    openapi_tags=tags_metadata,
)
app.state.bia = StateHolder()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.allowed_origins] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _load_register() -> None:
    holder = app.state.bia
    if not await state_service.open_store():
        holder.mark_unavailable("local store could not be opened")
        return
    try:
        holder.state = await state_service.load_state(seed=settings.seed_on_empty)
    except (RecordCorruptError, WriteFailedError, StoreUnavailableError) as exc:
        log_error("Failed to load register", error=str(exc))
        holder.mark_unavailable(str(exc))


@app.on_event("shutdown")
async def _close_store() -> None:
    await db.disconnect()


@app.exception_handler(StoreUnavailableError)
async def _store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    log_error("Store unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Local store is unavailable"},
    )


@app.exception_handler(WriteFailedError)
async def _write_failed_handler(request: Request, exc: WriteFailedError) -> JSONResponse:
    log_error(
        "Write failed",
        path=request.url.path,
        table=exc.table,
        record_id=exc.record_id,
        error=exc.reason,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


@app.exception_handler(RecordCorruptError)
async def _record_corrupt_handler(request: Request, exc: RecordCorruptError) -> JSONResponse:
    log_error("Unreadable stored record", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@app.get("/health", include_in_schema=False)
async def health() -> dict[str, str]:
    healthy = db.is_connected() and app.state.bia.available
    return {"status": "ok" if healthy else "degraded"}


app.include_router(resources.router)
app.include_router(activities.router)
app.include_router(risks.router)
app.include_router(strategies.router)
app.include_router(dashboard.router)
app.include_router(suggestions.router)
