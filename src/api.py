"""
FastAPI surface for the sleep & wellbeing insight core.

Route handlers are defined here; shared utilities live in routes/helpers.py.
Authentication is handled upstream: the caller's id arrives in X-User-Id.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from errors import InsightError
from insight_service import InsightService
from routes.helpers import _error_payload, _require_user, _window, get_insight_service

log = logging.getLogger("api")


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="Sleep & Wellbeing Insights API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(InsightError)
async def insight_error_handler(request: Request, exc: InsightError) -> JSONResponse:
    status, body = _error_payload(exc)
    return JSONResponse(status_code=status, content=body)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status, body = _error_payload(exc)
    return JSONResponse(status_code=status, content=body)


# ─── Routes ────────────────────────────────────────────────

@app.get("/")
def root() -> Dict[str, Any]:
    return {"service": "sleep-insights-api", "status": "ok"}


@app.get("/health-check")
def health_check() -> Dict[str, Any]:
    return {"status": "Online", "message": "Online"}


@app.get("/api/v1/insights/summary")
def insights_summary(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    summary = service.get_summary(user_id, _window(period, start_date, end_date))
    return {"message": "success", "summary": summary.to_json()}


@app.get("/api/v1/insights/correlation")
def insights_correlation(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    result = service.get_correlation(user_id, _window(period, start_date, end_date))
    return {"message": "success", "response": result.to_json()}


@app.get("/api/v1/insights/chartsdata")
def insights_charts_data(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    return service.get_charts_data(user_id, _window(period, start_date, end_date)).to_json()


@app.get("/api/v1/insights/report")
def insights_report(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    return service.get_insights(user_id, _window(period, start_date, end_date)).to_json()


@app.get("/api/v1/insights/ai/correlation")
def insights_ai_correlation(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    return {"insight": service.get_narrated_insight(user_id, _window(period, start_date, end_date))}


@app.get("/api/v1/insights/ai/overview")
def insights_ai_overview(
    period: Optional[str] = Query(default=None),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    x_user_id: Optional[str] = Header(default=None),
    service: InsightService = Depends(get_insight_service),
) -> Dict[str, Any]:
    user_id = _require_user(x_user_id)
    return {"insight": service.get_overview_insight(user_id, _window(period, start_date, end_date))}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
