# D:\github\DISASTER_REPORT_BACK\services\sync_controller.py
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, Tuple, Union

from pydantic import ValidationError

from core.errors import IncidentValidationError, RepositoryError
from models.incidents import Incident, IncidentDraft, FilterCriteria, INCIDENT_TYPES, SEVERITY_LEVELS
from services.incident_store import IncidentStore
from services.incident_repository import HttpIncidentRepository, FETCH_FAILED, CREATE_FAILED


class IncidentRepository(Protocol):
    def list_incidents(self, filters: Optional[FilterCriteria] = None) -> List[Incident]: ...
    def create_incident(self, draft: IncidentDraft) -> Incident: ...
    def health(self) -> Dict[str, Any]: ...


def _parse_draft(raw: Mapping) -> Tuple[IncidentDraft, Set[str]]:
    """Mapping → IncidentDraft；型別不對的欄位先拿掉，記在 bad（欄位名）裡，留給依序檢核報錯。"""
    data = dict(raw)
    try:
        return IncidentDraft.model_validate(data), set()
    except ValidationError as e:
        fields = IncidentDraft.model_fields
        by_key = {name: name for name in fields}
        by_key.update({f.alias: name for name, f in fields.items() if f.alias})
        bad = {by_key[err["loc"][0]] for err in e.errors() if err["loc"] and err["loc"][0] in by_key}
        drop = {k for k in data if by_key.get(k) in bad}
        return IncidentDraft.model_validate({k: v for k, v in data.items() if k not in drop}), bad


def validate_draft(draft: Union[IncidentDraft, Mapping]) -> IncidentDraft:
    """
    送出前的本地檢核，依序：類型 → 嚴重度 → 描述 → 位置 → 回報人。
    型別錯誤（例如緯度給字串）也在各自的順位才報，不會搶在前面的欄位之前。
    通過時回傳整理過的 draft（描述與回報人去空白，空白回報人視為未填）。
    """
    if isinstance(draft, IncidentDraft):
        d, bad = draft, set()
    else:
        d, bad = _parse_draft(draft)

    if "incident_type" in bad:
        raise IncidentValidationError("Invalid value for incidentType", field="incidentType")
    itype = (d.incident_type or "").strip()
    if not itype:
        raise IncidentValidationError("Please select an incident type", field="incidentType")
    if itype not in INCIDENT_TYPES:
        raise IncidentValidationError(f"Unknown incident type: {itype}", field="incidentType")
    if "severity" in bad or d.severity not in SEVERITY_LEVELS:
        raise IncidentValidationError(f"Invalid severity: {d.severity!r}", field="severity")
    if "description" in bad:
        raise IncidentValidationError("Invalid value for description", field="description")
    desc = (d.description or "").strip()
    if not desc:
        raise IncidentValidationError("Please provide a description", field="description")
    for name in ("latitude", "longitude"):
        if name in bad:
            raise IncidentValidationError(f"Invalid value for {name}", field=name)
    if d.latitude is None or d.longitude is None:
        raise IncidentValidationError("Please select a location on the map", field="location")
    if "reporter_name" in bad:
        raise IncidentValidationError("Invalid value for reporterName", field="reporterName")

    return d.model_copy(update={
        "incident_type": itype,
        "description": desc,
        "reporter_name": (d.reporter_name or "").strip() or None,
    })


class SyncController:
    """
    Store 與後端之間的橋樑：負責請求生命週期與錯誤轉譯。
    所有傳輸/伺服器錯誤都在這一層接住並寫進 store.error，不會往畫面層丟。
    驗證錯誤（IncidentValidationError）例外：同步丟給呼叫端，且不動 store。
    """

    def __init__(self, store: IncidentStore, repository: IncidentRepository,
                 server_side_filters: bool = False):
        self.store = store
        self.repository = repository
        # 是否把目前條件帶給後端過濾；結果一律再跑一次前端過濾
        self.server_side_filters = server_side_filters
        self._fetch_seq = 0

    # -----------------------------
    # 取全部
    # -----------------------------
    def _begin_fetch(self) -> int:
        self._fetch_seq += 1
        self.store.begin_request()
        return self._fetch_seq

    def _finish_fetch(self, seq: int, items: Optional[List[Incident]], err: Optional[str]) -> bool:
        if seq != self._fetch_seq:
            # 較早發出的請求較晚回來 → 丟棄，以最新的請求為準
            logging.info(f"[sync] 丟棄過期的 fetch #{seq}（最新 #{self._fetch_seq}）")
            self.store.end_request()
            return False
        if err is not None:
            self.store.end_request(error=err)
            return False
        self.store.end_request(publish=False)
        self.store.replace_incidents(items)
        return True

    def _remote_list(self) -> List[Incident]:
        filters = self.store.filters if self.server_side_filters else None
        return self.repository.list_incidents(filters)

    def fetch_all(self) -> bool:
        seq = self._begin_fetch()
        try:
            items = self._remote_list()
        except RepositoryError as e:
            return self._finish_fetch(seq, None, str(e) or FETCH_FAILED)
        except Exception as e:
            logging.exception("[sync] fetch 未預期例外")
            return self._finish_fetch(seq, None, f"{FETCH_FAILED}: {type(e).__name__}")
        return self._finish_fetch(seq, items, None)

    async def fetch_all_async(self) -> bool:
        seq = self._begin_fetch()
        loop = asyncio.get_running_loop()
        try:
            items = await loop.run_in_executor(None, self._remote_list)
        except RepositoryError as e:
            return self._finish_fetch(seq, None, str(e) or FETCH_FAILED)
        except Exception as e:
            logging.exception("[sync] fetch 未預期例外")
            return self._finish_fetch(seq, None, f"{FETCH_FAILED}: {type(e).__name__}")
        return self._finish_fetch(seq, items, None)

    # -----------------------------
    # 新增
    # -----------------------------
    def _finish_create(self, created: Optional[Incident], err: Optional[str]) -> Optional[Incident]:
        if err is not None:
            # 表單維持開啟讓使用者重送；不自動重試
            self.store.end_request(error=err)
            return None
        self.store.end_request(publish=False)
        self.store.append_incident(created)
        return created

    def create(self, draft: Union[IncidentDraft, Mapping]) -> Optional[Incident]:
        """成功回傳後端建立的 Incident（畫面層可據此關閉表單）；失敗回 None 並設定 store.error。"""
        clean = validate_draft(draft)
        self.store.begin_request()
        try:
            created = self.repository.create_incident(clean)
        except RepositoryError as e:
            return self._finish_create(None, str(e) or CREATE_FAILED)
        except Exception as e:
            logging.exception("[sync] create 未預期例外")
            return self._finish_create(None, f"{CREATE_FAILED}: {type(e).__name__}")
        return self._finish_create(created, None)

    async def create_async(self, draft: Union[IncidentDraft, Mapping]) -> Optional[Incident]:
        clean = validate_draft(draft)
        self.store.begin_request()
        loop = asyncio.get_running_loop()
        try:
            created = await loop.run_in_executor(None, self.repository.create_incident, clean)
        except RepositoryError as e:
            return self._finish_create(None, str(e) or CREATE_FAILED)
        except Exception as e:
            logging.exception("[sync] create 未預期例外")
            return self._finish_create(None, f"{CREATE_FAILED}: {type(e).__name__}")
        return self._finish_create(created, None)

    # -----------------------------
    # 其他
    # -----------------------------
    def check_health(self) -> Dict[str, Any]:
        return self.repository.health()


def build_controller(base_url: Optional[str] = None,
                     server_side_filters: bool = False) -> SyncController:
    """組裝點：啟動時建立一次 store + repository + controller。"""
    store = IncidentStore()
    repo = HttpIncidentRepository(base_url=base_url)
    logging.info(f"[sync] backend → {repo.incidents_url}")
    return SyncController(store, repo, server_side_filters=server_side_filters)
