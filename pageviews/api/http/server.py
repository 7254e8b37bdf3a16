"""FastAPI app: records inbound requests and serves the analytics dashboard."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from pageviews.api.http.dashboard import render_dashboard
from pageviews.domain.analytics.models import Report, RequestInfo
from pageviews.domain.analytics.service import Analytics
from pageviews.infra.config.settings import AnalyticsConfig, settings
from pageviews.shared import metrics
from pageviews.shared.async_utils import run_sync
from pageviews.shared.errors import InvalidDateError, UnauthorizedError
from pageviews.shared.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)
security_logger = get_logger("security")

_UNRECORDED_PATHS = {"/healthz", "/metrics", "/favicon.ico"}


def client_address(request: Request, trust_forwarded: bool = False) -> str:
    """Client host for ``request``; the first X-Forwarded-For hop when trusted."""
    if trust_forwarded:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def _should_record(path: str, dashboard_path: str) -> bool:
    if path in _UNRECORDED_PATHS:
        return False
    return not (path == dashboard_path or path.startswith(dashboard_path + "/"))


def _route_label(request: Request) -> str:
    # Шаблон маршруту; невідомі шляхи йдуть під OTHER
    route = request.scope.get("route")
    return getattr(route, "path", None) or "OTHER"


class ReportResponse(BaseModel):
    """Response model for the dashboard data endpoint."""

    date: str
    session_count: int
    total_hits: int
    url_hits: Dict[str, Dict[str, int]]


def create_app(
    config: Optional[AnalyticsConfig] = None,
    analytics: Optional[Analytics] = None,
    dashboard_path: Optional[str] = None,
    trust_forwarded: Optional[bool] = None,
) -> FastAPI:
    """
    Build the app around one Analytics instance.

    The recorder is created here rather than in the lifespan so that it
    exists even when the app is driven without startup events; the lifespan
    only starts and stops the flush scheduler.
    """
    recorder = analytics or Analytics(config or settings.analytics_config())
    dash_path = dashboard_path or settings.dashboard_path
    use_forwarded = settings.trust_forwarded if trust_forwarded is None else trust_forwarded

    @asynccontextmanager
    async def lifespan(_app: FastAPI):  # noqa: ARG001
        """Application lifespan context manager."""
        recorder.start()
        logger.info("Analytics recorder started (storage=%s)", recorder.config.directory)
        yield
        logger.info("Shutting down analytics recorder...")
        await recorder.stop()
        logger.info("Analytics recorder shutdown complete")

    app = FastAPI(title="Pageviews", lifespan=lifespan)
    app.state.analytics = recorder

    @app.middleware("http")
    async def recording_middleware(request: Request, call_next):
        """Record the page view, then log the request with its id and status."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        path = request.url.path

        if _should_record(path, dash_path):
            # Вставка бере lock сховища, тож виконуємо її поза event loop
            await run_sync(
                recorder.insert_request,
                RequestInfo(
                    address=client_address(request, use_forwarded),
                    user_agent=request.headers.get("User-Agent", ""),
                    path=path,
                    query=request.url.query,
                )
            )

        try:
            response = await call_next(request)
        except Exception:  # pylint: disable=broad-exception-caught
            error_id = str(uuid4())
            logger.exception(
                "request_error error_id=%s method=%s path=%s", error_id, request.method, path,
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "error_id": error_id},
            )

        status = response.status_code
        log_fn = logger.info if status < 400 else logger.warning
        log_fn("request id=%s method=%s path=%s status=%s", request_id, request.method, path, status)
        metrics.record_request(request.method, _route_label(request), status)
        response.headers["X-Request-ID"] = request_id
        return response

    async def _report(k: Optional[str], date: Optional[str]) -> Report:
        try:
            return await recorder.areport(k, date)
        except UnauthorizedError as exc:
            security_logger.warning("Dashboard access denied for %s", dash_path)
            raise HTTPException(status_code=401, detail="Unauthorized") from exc
        except InvalidDateError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get(dash_path, response_class=HTMLResponse)
    async def dashboard(
        k: Optional[str] = Query(None),
        date: Optional[str] = Query(None),
    ) -> HTMLResponse:
        """Дашборд переглядів за день (сьогодні з пам'яті, минулі дні з диску)."""
        report = await _report(k, date)
        return HTMLResponse(render_dashboard(report))

    @app.get(dash_path + "/data", response_model=ReportResponse)
    async def dashboard_data(
        k: Optional[str] = Query(None),
        date: Optional[str] = Query(None),
    ) -> ReportResponse:
        """The dashboard report as JSON."""
        report = await _report(k, date)
        return ReportResponse(**report.to_dict())

    @app.get("/healthz")
    async def healthz() -> Dict[str, Any]:
        """Basic health-check endpoint (public)."""
        return {"status": "ok", "scheduler_running": recorder.scheduler.running}

    @app.get("/metrics")
    async def metrics_endpoint() -> Dict[str, Any]:
        """In-memory recorder counters."""
        return {
            "counters": metrics.snapshot(),
            "resident_days": recorder.store.days(),
        }

    return app
