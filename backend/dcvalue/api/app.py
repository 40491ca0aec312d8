"""FastAPI application: create_app factory with /api endpoints."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from project root (backend/../.env or backend/.env)
_backend_dir = Path(__file__).resolve().parent.parent.parent
_project_root = _backend_dir.parent
load_dotenv(_project_root / ".env")
load_dotenv(_backend_dir / ".env")

from dcvalue.engine import ENGINE_VERSION
from dcvalue.exceptions import (
    DcValueError,
    LastPeriodError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from dcvalue.models.valuation import ValuationView
    from dcvalue.services.valuation_service import ValuationService

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DcValueError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 400),
    (LastPeriodError, 409),
]


def _http_error(exc: DcValueError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _view_payload(view: ValuationView) -> dict[str, Any]:
    return {
        "valuation": view.model_dump(mode="json"),
        "summary_dict": view.to_summary_dict(),
    }


def create_app(*, service: ValuationService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    service
        Optional pre-built service for dependency injection (e.g. tests).
        If not provided, one is created from environment variables on the
        first request.
    """
    app = FastAPI(title="dcvalue", version=ENGINE_VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state so tests can inject mocks
    app.state.service = service

    def _get_service() -> ValuationService:
        svc: ValuationService | None = app.state.service
        if svc is not None:
            return svc
        from dcvalue.api.deps import create_service

        svc = create_service()
        app.state.service = svc
        return svc

    # ------------------------------------------------------------------
    # GET /api/health
    # ------------------------------------------------------------------

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": ENGINE_VERSION}

    # ------------------------------------------------------------------
    # GET /api/buildings/{building_id}/valuation
    # ------------------------------------------------------------------

    @app.get("/api/buildings/{building_id}/valuation", response_model=None)
    def get_valuation(building_id: str) -> dict[str, Any] | JSONResponse:
        try:
            view = _get_service().get_valuation(building_id)
            return _view_payload(view)
        except NotFoundError as exc:
            raise _http_error(exc) from exc
        except Exception as exc:
            # Keep the page alive: answer with a fallback instead of crashing
            logger.exception("Failed to compose valuation for building %s", building_id)
            return JSONResponse(
                status_code=500,
                content={"building_id": building_id, "error": str(exc), "fallback": True},
            )

    # ------------------------------------------------------------------
    # PATCH /api/buildings/{building_id}/valuation
    # ------------------------------------------------------------------

    @app.patch("/api/buildings/{building_id}/valuation")
    def update_valuation(
        building_id: str,
        payload: dict[str, Any] = Body(...),
    ) -> dict[str, Any]:
        try:
            view = _get_service().update_valuation_details(building_id, payload)
        except DcValueError as exc:
            raise _http_error(exc) from exc
        return _view_payload(view)

    # ------------------------------------------------------------------
    # POST /api/buildings/{building_id}/valuation/preview
    # ------------------------------------------------------------------

    @app.post("/api/buildings/{building_id}/valuation/preview")
    def preview_valuation(
        building_id: str,
        payload: dict[str, Any] = Body(...),
    ) -> dict[str, Any]:
        try:
            view = _get_service().preview_valuation(building_id, payload)
        except DcValueError as exc:
            raise _http_error(exc) from exc
        return {**_view_payload(view), "preview": True}

    # ------------------------------------------------------------------
    # Use periods
    # ------------------------------------------------------------------

    @app.post("/api/use-periods", status_code=201)
    def create_use_period(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
        try:
            period = _get_service().create_use_period(payload)
        except DcValueError as exc:
            raise _http_error(exc) from exc
        return period.model_dump(mode="json")

    @app.patch("/api/use-periods/{use_period_id}")
    def update_use_period(
        use_period_id: str,
        payload: dict[str, Any] = Body(...),
    ) -> dict[str, Any]:
        try:
            period = _get_service().update_use_period(use_period_id, payload)
        except DcValueError as exc:
            raise _http_error(exc) from exc
        return period.model_dump(mode="json")

    @app.delete("/api/use-periods/{use_period_id}")
    def delete_use_period(use_period_id: str) -> dict[str, str]:
        try:
            _get_service().delete_use_period(use_period_id)
        except DcValueError as exc:
            raise _http_error(exc) from exc
        return {"status": "deleted", "id": use_period_id}

    return app
