# D:\github\DISASTER_REPORT_BACK\core\endpoints.py
import os

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:3001").rstrip("/")


def build_endpoints(base_url: str) -> dict:
    base = (base_url or "").rstrip("/")
    return {
        # 事件列表（GET，可帶 types/severities/startDate/endDate）與新增（POST）
        "incidents": f"{base}/api/incidents",
        # 存活探針
        "health": f"{base}/api/health",
    }


ENDPOINTS = build_endpoints(BACKEND_URL)
