# D:\github\DISASTER_REPORT_BACK\services\incident_repository.py
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from core import config as CFG
from core.endpoints import build_endpoints
from core.errors import RepositoryError
from core.http_client import http_get, http_post
from models.incidents import Incident, IncidentDraft, FilterCriteria
from parsers.incidents_parser import parse_incident, parse_incident_list, error_message

FETCH_FAILED = "Failed to fetch incidents"
CREATE_FAILED = "Failed to create incident"


def filter_params(filters: Optional[FilterCriteria]) -> List[Tuple[str, str]]:
    """FilterCriteria → 查詢參數（types/severities 可重複）。"""
    if filters is None:
        return []
    params: List[Tuple[str, str]] = []
    params += [("types", t) for t in filters.types]
    params += [("severities", s) for s in filters.severities]
    if filters.date_range.start:
        params.append(("startDate", filters.date_range.start))
    if filters.date_range.end:
        params.append(("endDate", filters.date_range.end))
    return params


def _json_or_none(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return None


class HttpIncidentRepository:
    """後端 /api/incidents 的 HTTP 用戶端。所有失敗都轉成 RepositoryError。"""

    def __init__(self, base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = CFG.DEFAULT_TIMEOUT):
        ep = build_endpoints(base_url) if base_url else {"incidents": CFG.INCIDENTS_URL,
                                                         "health": CFG.HEALTH_URL}
        self.incidents_url = ep["incidents"]
        self.health_url = ep["health"]
        self.session = session
        self.timeout = timeout

    def list_incidents(self, filters: Optional[FilterCriteria] = None) -> List[Incident]:
        try:
            r = http_get(self.incidents_url, params=filter_params(filters),
                         timeout=self.timeout, session=self.session)
        except requests.RequestException as e:
            logging.warning(f"[repo] GET {self.incidents_url} 連線失敗：{type(e).__name__}: {e}")
            raise RepositoryError(f"{FETCH_FAILED}: {type(e).__name__}") from e

        if not r.ok:
            msg = error_message(_json_or_none(r), FETCH_FAILED)
            logging.warning(f"[repo] GET {self.incidents_url} → {r.status_code}：{msg}")
            raise RepositoryError(msg, status_code=r.status_code)

        try:
            items = parse_incident_list(_json_or_none(r))
        except ValueError as e:
            logging.warning(f"[repo] 回應格式錯誤：{e}")
            raise RepositoryError(f"{FETCH_FAILED}: malformed response", status_code=r.status_code) from e
        logging.info(f"[repo] 取得 {len(items)} 筆事件")
        return items

    def create_incident(self, draft: IncidentDraft) -> Incident:
        payload = draft.to_wire()
        try:
            r = http_post(self.incidents_url, payload, timeout=self.timeout, session=self.session)
        except requests.RequestException as e:
            logging.warning(f"[repo] POST {self.incidents_url} 連線失敗：{type(e).__name__}: {e}")
            raise RepositoryError(f"{CREATE_FAILED}: {type(e).__name__}") from e

        body = _json_or_none(r)
        if not r.ok:
            msg = error_message(body, CREATE_FAILED)
            logging.warning(f"[repo] POST {self.incidents_url} → {r.status_code}：{msg}")
            raise RepositoryError(msg, status_code=r.status_code)

        try:
            created = parse_incident(body)
        except ValueError as e:
            # pydantic ValidationError 是 ValueError 的子類
            raise RepositoryError(f"{CREATE_FAILED}: malformed response", status_code=r.status_code) from e
        logging.info(f"[repo] 新增事件 {created.id}（{created.incident_type}/{created.severity}）")
        return created

    def health(self) -> Dict[str, Any]:
        try:
            r = http_get(self.health_url, timeout=self.timeout, session=self.session)
            r.raise_for_status()
        except requests.RequestException as e:
            raise RepositoryError(f"Health check failed: {type(e).__name__}") from e
        return _json_or_none(r) or {}
