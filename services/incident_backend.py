# D:\github\DISASTER_REPORT_BACK\services\incident_backend.py
# 參考後端用的記憶體資料源（重啟即清空），啟動時放入幾筆範例事件
import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from models.incidents import Incident, FilterCriteria, DateRange
from parsers.incidents_parser import parse_timestamp
from services.filter_service import apply_filter

REQUIRED_FIELDS = ("incidentType", "severity", "description", "latitude", "longitude")


def iso_now(offset: timedelta = timedelta(0)) -> str:
    ts = datetime.now(timezone.utc) - offset
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return f"{int(time.time() * 1000)}{uuid.uuid4().hex[:9]}"


def sample_incidents() -> List[Incident]:
    rows = [
        ("1", "Fire", "Critical",
         "Large warehouse fire spreading rapidly. Multiple fire departments responding.",
         40.7589, -73.9851, "John Smith", timedelta(hours=2)),
        ("2", "Flood", "High",
         "Flash flooding in downtown area. Several streets impassable.",
         40.7505, -73.9934, None, timedelta(hours=5)),
        ("3", "Explosion", "Critical",
         "Industrial explosion at chemical plant. Evacuation zone established.",
         40.7282, -74.0776, "Emergency Services", timedelta(minutes=30)),
        ("4", "Medical Emergency", "Medium",
         "Multi-vehicle accident on highway. Several injuries reported.",
         40.7614, -73.9776, "Highway Patrol", timedelta(minutes=15)),
    ]
    return [
        Incident(id=i, incident_type=t, severity=s, description=d, latitude=lat,
                 longitude=lon, reporter_name=who, timestamp=iso_now(ago))
        for i, t, s, d, lat, lon, who, ago in rows
    ]


def missing_fields(payload: Dict[str, Any]) -> List[str]:
    # 0 是合法座標，只有 None / 空字串才算缺
    return [k for k in REQUIRED_FIELDS if payload.get(k) is None or payload.get(k) == ""]


class InMemoryIncidentBackend:
    def __init__(self, seed: Optional[List[Incident]] = None):
        self._rows: List[Incident] = list(sample_incidents() if seed is None else seed)

    def list(self, types: Optional[List[str]] = None, severities: Optional[List[str]] = None,
             start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[Incident]:
        cond = FilterCriteria(
            types=tuple(types or ()),
            severities=tuple(severities or ()),
            date_range=DateRange(start=start_date or None, end=end_date or None),
        )
        hits = apply_filter(self._rows, cond)
        # 新到舊
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        hits.sort(key=lambda x: parse_timestamp(x.timestamp) or epoch, reverse=True)
        return hits

    def create(self, payload: Dict[str, Any]) -> Incident:
        """payload 已確認必填欄位齊全；型別不符時丟 pydantic ValidationError。"""
        created = Incident(
            id=new_id(),
            incident_type=payload["incidentType"],
            severity=payload["severity"],
            description=payload["description"],
            latitude=payload["latitude"],
            longitude=payload["longitude"],
            reporter_name=payload.get("reporterName") or None,
            timestamp=iso_now(),
        )
        self._rows.append(created)
        logging.info(f"[backend] 新增事件 {created.id}（{created.incident_type}/{created.severity}）")
        return created
