# D:\github\DISASTER_REPORT_BACK\core\config.py
import os
from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(filename=".env", usecwd=True), override=False)

from .endpoints import ENDPOINTS  # noqa: E402  (.env 先載入)

# Timeouts / Retry
DEFAULT_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "6.0"))
RETRY_TOTAL = int(os.getenv("HTTP_RETRY_TOTAL", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# 參考後端（FastAPI）
PORT = int(os.getenv("PORT", "3001"))
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,https://disaster-report.vercel.app").split(",")
    if o.strip()
]

# URL 由 endpoints.py 統一控管
INCIDENTS_URL = ENDPOINTS["incidents"]
HEALTH_URL = ENDPOINTS["health"]
