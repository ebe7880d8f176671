# D:\github\DISASTER_REPORT_BACK\parsers\incidents_parser.py
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from pydantic import ValidationError
from models.incidents import Incident  # ← 絕對匯入

_DAY = timedelta(days=1)
_MS = timedelta(milliseconds=1)

def parse_timestamp(s: Optional[str]) -> Optional[datetime]:
    """ISO-8601 → aware datetime；沒有時區視為 UTC；無法解析回 None。"""
    if not s or not isinstance(s, str):
        return None
    txt = s.strip()
    if txt.endswith(("Z", "z")):
        txt = txt[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(txt)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def _is_date_only(s: str) -> bool:
    return len(s.strip()) == 10 and "T" not in s

def day_start(s: Optional[str]) -> Optional[datetime]:
    # 起日：當天 00:00:00.000 UTC；若給的是完整時間就照用
    dt = parse_timestamp(s)
    if dt is None:
        return None
    if _is_date_only(s):
        return dt.replace(hour=0, minute=0, second=0, microsecond=0)
    return dt

def day_end(s: Optional[str]) -> Optional[datetime]:
    # 迄日：當天 23:59:59.999 UTC，整天都算
    dt = parse_timestamp(s)
    if dt is None:
        return None
    if _is_date_only(s):
        return dt.replace(hour=0, minute=0, second=0, microsecond=0) + _DAY - _MS
    return dt

def parse_incident(obj: Any) -> Incident:
    return Incident.model_validate(obj)

def parse_incident_list(payload: Any) -> List[Incident]:
    """GET /api/incidents 的回應。整批要嘛全部成功，要嘛丟 ValueError（不做部分覆蓋）。"""
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array of incidents, got {type(payload).__name__}")
    items = []
    for i, row in enumerate(payload):
        try:
            items.append(parse_incident(row))
        except ValidationError as e:
            raise ValueError(f"invalid incident at index {i}: {e.error_count()} field error(s)") from e
    return items

def error_message(body: Any, default: str) -> str:
    """後端錯誤格式為 {"error": "..."}；取不到就用預設訊息。"""
    if isinstance(body, dict):
        msg = body.get("error")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return default
