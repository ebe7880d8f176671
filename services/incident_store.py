# D:\github\DISASTER_REPORT_BACK\services\incident_store.py
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Tuple, Union

from models.incidents import Incident, FilterCriteria, FilterUpdate
from services.filter_service import apply_filter

BASEMAP_STYLES = ("streets", "satellite")


@dataclass(frozen=True)
class IncidentStoreState:
    """給畫面層讀取的快照。filtered_incidents 一定等於 apply_filter(incidents, filters)。"""
    incidents: Tuple[Incident, ...] = ()
    filtered_incidents: Tuple[Incident, ...] = ()
    filters: FilterCriteria = field(default_factory=FilterCriteria)
    selected_incident: Optional[Incident] = None
    loading: bool = False
    error: Optional[str] = None
    basemap_style: str = "streets"


Listener = Callable[[IncidentStoreState], None]


class IncidentStore:
    """
    事件狀態的唯一來源。
    - 所有變更都走下面的方法；每個方法回傳前都已重算 filtered_incidents。
    - loading/error 只由 SyncController 透過 begin_request/end_request 推動。
    - 由組裝點（build_controller）建立一次，整個 session 共用同一個實例。
    """

    def __init__(self, incidents: Optional[List[Incident]] = None,
                 filters: Optional[FilterCriteria] = None):
        self._incidents: Tuple[Incident, ...] = tuple(incidents or ())
        self._filters = filters or FilterCriteria()
        self._filtered: Tuple[Incident, ...] = tuple(apply_filter(self._incidents, self._filters))
        self._selected: Optional[Incident] = None
        self._inflight = 0
        self._error: Optional[str] = None
        self._basemap = "streets"
        self._listeners: List[Listener] = []

    # -----------------------------
    # 讀取
    # -----------------------------
    @property
    def state(self) -> IncidentStoreState:
        return IncidentStoreState(
            incidents=self._incidents,
            filtered_incidents=self._filtered,
            filters=self._filters,
            selected_incident=self._selected,
            loading=self._inflight > 0,
            error=self._error,
            basemap_style=self._basemap,
        )

    @property
    def incidents(self) -> Tuple[Incident, ...]:
        return self._incidents

    @property
    def filtered_incidents(self) -> Tuple[Incident, ...]:
        return self._filtered

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    @property
    def selected_incident(self) -> Optional[Incident]:
        return self._selected

    @property
    def loading(self) -> bool:
        return self._inflight > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    # -----------------------------
    # 訂閱
    # -----------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _publish(self) -> None:
        snap = self.state
        for fn in list(self._listeners):
            try:
                fn(snap)
            except Exception:
                # 單一畫面元件壞掉不影響其他訂閱者
                logging.exception("[store] listener 例外")

    def _recompute(self) -> None:
        self._filtered = tuple(apply_filter(self._incidents, self._filters))

    # -----------------------------
    # 過濾條件
    # -----------------------------
    def set_filters(self, partial: Union[FilterUpdate, Mapping, None] = None, **changes) -> None:
        """淺層合併；date_range 以巢狀部分更新合併。未給的欄位保留原值。
        不認得的欄位（拼錯）直接丟 pydantic ValidationError，狀態不變。"""
        if partial is None:
            update = FilterUpdate.model_validate(changes)
        elif isinstance(partial, FilterUpdate):
            update = partial
        else:
            update = FilterUpdate.model_validate({**dict(partial), **changes})
        self._filters = update.merge_into(self._filters)
        self._recompute()
        logging.debug(f"[store] filters → {self._filters!r}，顯示 {len(self._filtered)}/{len(self._incidents)}")
        self._publish()

    def clear_filters(self) -> None:
        self._filters = FilterCriteria()
        self._recompute()
        self._publish()

    # -----------------------------
    # 選取
    # -----------------------------
    def set_selected_incident(self, incident: Optional[Incident]) -> None:
        self._selected = incident
        self._publish()

    def toggle_basemap_style(self) -> str:
        self._basemap = "satellite" if self._basemap == "streets" else "streets"
        self._publish()
        return self._basemap

    # -----------------------------
    # 資料
    # -----------------------------
    def replace_incidents(self, incidents: List[Incident]) -> None:
        self._incidents = tuple(incidents)
        self._recompute()
        # 選取的事件若已不在新清單中就清掉；還在就換成新的那筆
        if self._selected is not None:
            fresh = next((x for x in self._incidents if x.id == self._selected.id), None)
            if fresh is None:
                logging.info(f"[store] 選取的事件 {self._selected.id} 已不存在，清除選取")
            self._selected = fresh
        self._publish()

    def append_incident(self, incident: Incident) -> None:
        self._incidents = self._incidents + (incident,)
        self._recompute()
        self._publish()

    # -----------------------------
    # 請求狀態（僅 SyncController 使用）
    # -----------------------------
    def begin_request(self) -> None:
        self._inflight += 1
        self._error = None
        self._publish()

    def end_request(self, error: Optional[str] = None, publish: bool = True) -> None:
        self._inflight = max(0, self._inflight - 1)
        if error is not None:
            self._error = error
        if publish:
            self._publish()
