"""Model proxy endpoint: forwards Messages API requests with the server-side credential."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from family_scheduler.core.config import settings
from family_scheduler.observability.metrics import log_metric
from family_scheduler.observability.tracing import annotate, trace
from family_scheduler.services.model_gateway import forward_messages

router = APIRouter()


@router.post("/api/chat", tags=["proxy"])
async def chat_proxy(request: Request) -> JSONResponse:
    """Forward the body verbatim and pass the upstream status through."""
    request_id = getattr(request.state, "request_id", None)
    body = await request.body()
    start = perf_counter()

    with trace("proxy.chat", metadata={"body_bytes": len(body)}, request_id=request_id) as span:
        result = await run_in_threadpool(forward_messages, body)
        annotate(span, status_code=result.status_code)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("proxy.chat.status", result.status_code)
    log_metric("proxy.chat.latency_ms", latency_ms)
    return JSONResponse(status_code=result.status_code, content=result.payload)


@router.api_route("/api/chat", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def chat_proxy_wrong_method() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, content={"error": "Method not allowed"})


@router.get("/api/key-status", tags=["proxy"])
def key_status() -> dict[str, object]:
    """Report whether the upstream credential is configured without revealing it."""
    api_key = settings.anthropic_api_key or ""
    return {"hasKey": bool(api_key), "keyLength": len(api_key)}
