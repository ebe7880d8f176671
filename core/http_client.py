# D:\github\DISASTER_REPORT_BACK\core\http_client.py
from typing import Any, Optional

import requests
from urllib3.util.retry import Retry
from requests.adapters import HTTPAdapter
from .config import DEFAULT_TIMEOUT, RETRY_TOTAL

_session = None

def new_session() -> requests.Session:
    s = requests.Session()
    # 只重試 GET；POST 建立事件不可重送，避免重複新增
    retries = Retry(
        total=RETRY_TOTAL, backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(['GET']),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": "disaster-report/1.0", "Accept": "application/json"})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s

def get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = new_session()
    return _session

def http_get(url: str, params: Optional[Any] = None, timeout: float = DEFAULT_TIMEOUT,
             session: Optional[requests.Session] = None) -> requests.Response:
    return (session or get_session()).get(url, params=params, timeout=timeout)

def http_post(url: str, payload: Any, timeout: float = DEFAULT_TIMEOUT,
              session: Optional[requests.Session] = None) -> requests.Response:
    return (session or get_session()).post(url, json=payload, timeout=timeout)
