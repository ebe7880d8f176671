# D:\github\DISASTER_REPORT_BACK\routers\incidents.py
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from services.incident_backend import InMemoryIncidentBackend, iso_now, missing_fields

router = APIRouter(prefix="/api", tags=["incidents"])


def _backend(request: Request) -> InMemoryIncidentBackend:
    return request.app.state.incident_backend


@router.get("/incidents")
async def list_incidents(request: Request,
                         types: List[str] = Query(default=[]),
                         severities: List[str] = Query(default=[]),
                         startDate: Optional[str] = Query(default=None, description="YYYY-MM-DD（含）"),
                         endDate: Optional[str] = Query(default=None, description="YYYY-MM-DD（含整天）")):
    try:
        items = _backend(request).list(types, severities, startDate, endDate)
    except Exception:
        logging.exception("[api] 查詢事件失敗")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch incidents"})
    return [x.to_wire() for x in items]


@router.post("/incidents", status_code=201)
async def create_incident(request: Request, payload: Any = Body(None)):
    # body 不是 JSON 物件（陣列、字串…）一律視為缺欄位
    if not isinstance(payload, dict) or missing_fields(payload):
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})
    try:
        created = _backend(request).create(payload)
    except ValidationError as e:
        bad = ", ".join(str(err["loc"][0]) for err in e.errors())
        return JSONResponse(status_code=400, content={"error": f"Invalid fields: {bad}"})
    except Exception:
        logging.exception("[api] 新增事件失敗")
        return JSONResponse(status_code=500, content={"error": "Failed to create incident"})
    return created.to_wire()


@router.get("/health")
async def health():
    return {"status": "OK", "timestamp": iso_now()}
