# D:\github\DISASTER_REPORT_BACK\services\filter_service.py
import logging
from typing import Iterable, List, Optional, Tuple
from datetime import datetime

from models.incidents import Incident, FilterCriteria
from parsers.incidents_parser import parse_timestamp, day_start, day_end

CRITICAL_TYPES = ("Fire", "Explosion")

# -----------------------------
# 日期邊界：無法解析的邊界視為「不限制」
# -----------------------------
def _bounds(filters: FilterCriteria) -> Tuple[Optional[datetime], Optional[datetime]]:
    dr = filters.date_range
    lo = day_start(dr.start) if dr.start else None
    hi = day_end(dr.end) if dr.end else None
    if dr.start and lo is None:
        logging.debug(f"[filter] 起日無法解析，忽略：{dr.start!r}")
    if dr.end and hi is None:
        logging.debug(f"[filter] 迄日無法解析，忽略：{dr.end!r}")
    return lo, hi

# -----------------------------
# 過濾：同維度 OR、跨維度 AND，保留原順序
# -----------------------------
def apply_filter(incidents: Iterable[Incident], filters: FilterCriteria) -> List[Incident]:
    types = set(filters.types)
    severities = set(filters.severities)
    lo, hi = _bounds(filters)

    def ok(it: Incident) -> bool:
        if types and it.incident_type not in types:
            return False
        if severities and it.severity not in severities:
            return False
        if lo is not None or hi is not None:
            ts = parse_timestamp(it.timestamp)
            if ts is None:
                # 有日期條件但時間戳壞掉 → 無法證明在範圍內
                return False
            if lo is not None and ts < lo:
                return False
            if hi is not None and ts > hi:
                return False
        return True

    return [x for x in incidents if ok(x)]

def matches(incident: Incident, filters: FilterCriteria) -> bool:
    return bool(apply_filter([incident], filters))

def has_active_filters(filters: FilterCriteria) -> bool:
    return bool(filters.types or filters.severities or filters.date_range.is_set())

# -----------------------------
# 列表統計
# -----------------------------
def is_critical(it: Incident) -> bool:
    """火災/爆炸且嚴重度 Critical → 需立即處理。"""
    return it.incident_type in CRITICAL_TYPES and it.severity == "Critical"

def count_critical(incidents: Iterable[Incident]) -> int:
    return sum(1 for x in incidents if is_critical(x))
