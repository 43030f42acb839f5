"""Main FastAPI application for the Family Scheduler backend."""
from fastapi import FastAPI, Request

from family_scheduler.api.routes.agent_log import router as agent_log_router
from family_scheduler.api.routes.calendar import router as calendar_router
from family_scheduler.api.routes.chat import router as chat_router
from family_scheduler.api.routes.conversations import router as conversations_router
from family_scheduler.core.config import settings
from family_scheduler.core.logging import configure_logging
from family_scheduler.core.middleware import RequestIDMiddleware
from family_scheduler.observability.client import init_opik
from family_scheduler.observability.tracing import trace

configure_logging(log_level=settings.log_level, debug=settings.debug)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(chat_router)
app.include_router(conversations_router)
app.include_router(calendar_router)
app.include_router(agent_log_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
