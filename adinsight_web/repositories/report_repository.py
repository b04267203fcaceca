from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from adinsight_web.adapters.supabase_reports import RemoteTableError, SupabaseReportTable
from adinsight_web.config.backend_config import BackendConfigStore
from adinsight_web.domain.errors import (
    CloudDeleteError,
    CloudUnavailable,
    CloudWriteError,
    LocalDeleteError,
    LocalWriteError,
    MalformedResponseError,
    ValidationError,
)
from adinsight_web.domain.models import BackendConfig, DashboardData, SavedReport
from adinsight_web.repositories.local_store import REPORTS_KEY, LocalKeyValueStore, LocalStoreError

logger = logging.getLogger(__name__)

_B36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_B36[r])
    return "".join(reversed(out))


def generate_id() -> str:
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # no OS randomness source
        return _base36(int(time.time() * 1000)) + _base36(random.getrandbits(48))


def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_report_title(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"광고 성과 분석 - {today:%Y-%m-%d}"


def filter_reports(reports: List[SavedReport], term: str) -> List[SavedReport]:
    term = (term or "").strip().lower()
    if not term:
        return list(reports)
    return [r for r in reports if term in r.title.lower()]


@dataclass
class LocalReportStore:
    """
    Reports kept in the local key-value medium, newest first.
    Order is insertion order: a new report is always prepended.
    """
    kv: LocalKeyValueStore

    def _stored(self) -> List[Any]:
        stored = self.kv.get(REPORTS_KEY)
        return stored if isinstance(stored, list) else []

    def _raw(self) -> List[Any]:
        try:
            return self._stored()
        except LocalStoreError:
            logger.exception("Failed to read reports from local store")
            return []

    def list_reports(self) -> List[SavedReport]:
        out: List[SavedReport] = []
        for doc in self._raw():
            try:
                out.append(SavedReport.from_dict(doc))
            except (MalformedResponseError, KeyError, TypeError, AttributeError):
                logger.warning("Skipping unreadable local report entry: %r", doc if not isinstance(doc, dict) else doc.get("id"))
        return out

    def insert(self, report: SavedReport) -> None:
        try:
            docs = [report.to_dict()] + self._stored()
            self.kv.set(REPORTS_KEY, docs)
        except LocalStoreError as e:
            logger.exception("Local store save error")
            raise LocalWriteError(detail=str(e)) from e
        logger.info("Saved report locally: %s", report.id)

    def delete(self, report_id: str) -> None:
        try:
            docs = self._stored()
            kept = [d for d in docs if not (isinstance(d, dict) and str(d.get("id")) == report_id)]
            if len(kept) == len(docs):
                return
            self.kv.set(REPORTS_KEY, kept)
        except LocalStoreError as e:
            logger.exception("Local store delete error")
            raise LocalDeleteError(detail=str(e)) from e


RemoteFactory = Callable[[BackendConfig], SupabaseReportTable]


class ReportGateway:
    """
    Report CRUD over exactly one backend per call.

    The backend is picked by ``config_store.is_cloud_enabled()`` at call time.
    When cloud is enabled a remote failure is raised, never papered over with
    local data: the two stores are independent and are never synced.
    """

    def __init__(
        self,
        config_store: BackendConfigStore,
        local_reports: LocalReportStore,
        remote_factory: RemoteFactory,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.config_store = config_store
        self.local_reports = local_reports
        self._remote_factory = remote_factory
        self._clock = clock
        self._remote: Optional[SupabaseReportTable] = None
        config_store.add_listener(self.reset_connection)

    @property
    def storage_mode(self) -> str:
        return "cloud" if self.config_store.is_cloud_enabled() else "local"

    def reset_connection(self) -> None:
        remote, self._remote = self._remote, None
        if remote is not None:
            remote.close()

    def _remote_table(self) -> SupabaseReportTable:
        if self._remote is None:
            cfg = self.config_store.resolve_config()
            self._remote = self._remote_factory(cfg)
        return self._remote

    def list_reports(self) -> List[SavedReport]:
        if not self.config_store.is_cloud_enabled():
            return self.local_reports.list_reports()

        try:
            rows = self._remote_table().select_all()
            return [SavedReport.from_dict(r) for r in rows]
        except RemoteTableError as e:
            logger.error("Cloud fetch failed: %s", e)
            raise CloudUnavailable(detail=str(e)) from e
        except (MalformedResponseError, KeyError, TypeError, AttributeError) as e:
            logger.error("Cloud returned an unreadable report row: %s", e)
            raise CloudUnavailable(detail=str(e)) from e

    def get_report(self, report_id: str) -> Optional[SavedReport]:
        return next((r for r in self.list_reports() if r.id == report_id), None)

    def save_report(self, title: str, data: Union[DashboardData, Mapping[str, Any], None]) -> SavedReport:
        if not data:
            raise ValidationError("저장할 데이터가 없습니다.")
        if not isinstance(data, DashboardData):
            try:
                data = DashboardData.from_dict(data)
            except MalformedResponseError as e:
                raise ValidationError(f"저장할 데이터 형식이 올바르지 않습니다: {e.message}") from e

        report = SavedReport(
            id=generate_id(),
            title=(title or "").strip() or default_report_title(),
            date=utc_timestamp(self._clock()),
            data=data,
        )

        if not self.config_store.is_cloud_enabled():
            self.local_reports.insert(report)
            return report

        row: Dict[str, Any] = report.to_dict()
        try:
            self._remote_table().insert(row)
        except RemoteTableError as e:
            logger.error("Cloud save error: %s", e)
            raise CloudWriteError(f"클라우드 저장 실패: {e}", detail=str(e)) from e
        logger.info("Saved report to cloud: %s", report.id)
        return report

    def delete_report(self, report_id: str) -> None:
        if not self.config_store.is_cloud_enabled():
            self.local_reports.delete(report_id)
            return

        try:
            self._remote_table().delete(report_id)
        except RemoteTableError as e:
            logger.error("Cloud delete error: %s", e)
            raise CloudDeleteError(f"삭제 실패: {e}", detail=str(e)) from e
