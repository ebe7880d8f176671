# D:\github\DISASTER_REPORT_BACK\models\incidents.py
from typing import Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

INCIDENT_TYPES: Tuple[str, ...] = (
    "Fire",
    "Flood",
    "Earthquake",
    "Hurricane",
    "Tornado",
    "Landslide",
    "Explosion",
    "Chemical Spill",
    "Medical Emergency",
    "Other",
)

SEVERITY_LEVELS: Tuple[str, ...] = ("Low", "Medium", "High", "Critical")   # 由低到高的緊急程度

Severity = Literal["Low", "Medium", "High", "Critical"]


class _Wire(BaseModel):
    # 屬性用 snake_case，JSON 欄位用 camelCase；兩種輸入都接受
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Incident(_Wire):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    incident_type: str = Field(alias="incidentType")
    severity: Severity
    description: str
    latitude: float
    longitude: float
    reporter_name: Optional[str] = Field(default=None, alias="reporterName")
    timestamp: str                                   # ISO-8601，由後端指定

    def to_wire(self) -> dict:
        # reporterName 一律輸出（可為 null）
        return self.model_dump(by_alias=True)


class IncidentDraft(_Wire):
    """尚未送出的事件（沒有 id / timestamp）。欄位全部可空，檢核交給 SyncController。"""

    incident_type: Optional[str] = Field(default=None, alias="incidentType")
    severity: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    reporter_name: Optional[str] = Field(default=None, alias="reporterName")


class DateRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Optional[str] = None      # YYYY-MM-DD（含當天）
    end: Optional[str] = None        # YYYY-MM-DD（含整天）

    def is_set(self) -> bool:
        return bool(self.start or self.end)


class FilterCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    types: Tuple[str, ...] = ()
    severities: Tuple[str, ...] = ()
    date_range: DateRange = Field(default_factory=DateRange, alias="dateRange")


class DateRangeUpdate(BaseModel):
    """只合併有明確給的欄位；給 None 或空字串代表清除該邊界。"""

    model_config = ConfigDict(extra="forbid")

    start: Optional[str] = None
    end: Optional[str] = None


class FilterUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    types: Optional[Tuple[str, ...]] = None
    severities: Optional[Tuple[str, ...]] = None
    date_range: Optional[DateRangeUpdate] = Field(default=None, alias="dateRange")

    def merge_into(self, current: FilterCriteria) -> FilterCriteria:
        changes = {}
        given = self.model_fields_set
        if "types" in given:
            changes["types"] = tuple(self.types or ())
        if "severities" in given:
            changes["severities"] = tuple(self.severities or ())
        if "date_range" in given:
            dr = current.date_range
            if self.date_range is None:
                dr = DateRange()
            else:
                bounds = {k: (getattr(self.date_range, k) or None)
                          for k in self.date_range.model_fields_set}
                dr = dr.model_copy(update=bounds)
            changes["date_range"] = dr
        return current.model_copy(update=changes)
