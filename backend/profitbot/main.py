"""Main FastAPI application for the ProfitBot backend."""
from fastapi import FastAPI, Request

from profitbot.api.routes.calendar import router as calendar_router
from profitbot.api.routes.generate import router as generate_router
from profitbot.api.routes.plan import router as plan_router
from profitbot.core.config import settings
from profitbot.core.logging import configure_logging
from profitbot.core.middleware import RequestIDMiddleware
from profitbot.db.session import init_db
from profitbot.observability.client import init_opik
from profitbot.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(generate_router)
app.include_router(plan_router)
app.include_router(calendar_router)


@app.on_event("startup")
async def startup_storage() -> None:
    """Make sure the local key-value table exists."""
    init_db()


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness check")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can check the API is up."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
