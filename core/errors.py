# D:\github\DISASTER_REPORT_BACK\core\errors.py
from typing import Optional


class IncidentError(Exception):
    """所有事件相關錯誤的基底。"""


class IncidentValidationError(IncidentError, ValueError):
    """新增事件前的本地檢核失敗；不會送出任何請求。"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class RepositoryError(IncidentError, RuntimeError):
    """後端回非 2xx 或連線失敗。"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
