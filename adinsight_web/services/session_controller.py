from __future__ import annotations

import logging
import secrets
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Union

from adinsight_web.domain.errors import AdInsightError
from adinsight_web.domain.models import AnalysisStatus, AppView, DashboardData, SavedReport
from adinsight_web.services.admin_auth import AdminAuthenticator
from adinsight_web.services.demo_data import build_demo_dashboard

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "알 수 없는 오류가 발생했습니다."
LOGIN_ERROR_MESSAGE = "비밀번호가 올바르지 않습니다."


class SessionController:
    """
    Per-visitor application state: analysis status x current view x admin flag.

    Analysis: IDLE -> ANALYZING -> COMPLETE | ERROR, and back to IDLE via
    ``reset``/``retry``. The demo path goes IDLE -> ANALYZING and completes
    on the first ``poll`` after ``demo_delay`` seconds of the injected clock.
    """

    def __init__(
        self,
        authenticator: AdminAuthenticator,
        *,
        clock: Callable[[], float] = time.monotonic,
        demo_delay: float = 1.5,
        demo_factory: Callable[[], DashboardData] = build_demo_dashboard,
    ):
        self._auth = authenticator
        self._clock = clock
        self.demo_delay = demo_delay
        self._demo_factory = demo_factory
        self._demo_due: Optional[float] = None

        self._status = AnalysisStatus.IDLE
        self._data: Optional[DashboardData] = None
        self.error_message: Optional[str] = None

        self.is_admin = False
        self.view = AppView.ANALYSIS
        self.login_error: Optional[str] = None

    # --- analysis lifecycle ---

    def poll(self) -> None:
        if self._demo_due is not None and self._clock() >= self._demo_due:
            self._demo_due = None
            self.complete(self._demo_factory())

    @property
    def status(self) -> AnalysisStatus:
        self.poll()
        return self._status

    @property
    def data(self) -> Optional[DashboardData]:
        self.poll()
        return self._data

    def begin_analysis(self) -> None:
        self._demo_due = None
        self._status = AnalysisStatus.ANALYZING
        self._data = None
        self.error_message = None

    def complete(self, data: DashboardData) -> None:
        self._demo_due = None
        self._data = data
        self.error_message = None
        self._status = AnalysisStatus.COMPLETE

    def fail(self, message: str) -> None:
        self._demo_due = None
        self._data = None
        self.error_message = message or UNKNOWN_ERROR_MESSAGE
        self._status = AnalysisStatus.ERROR

    def submit(self, raw_text: str, analyzer: Callable[[str], DashboardData]) -> AnalysisStatus:
        self.begin_analysis()
        try:
            data = analyzer(raw_text)
        except AdInsightError as e:
            logger.warning("Analysis failed: %s (%s)", e.message, e.detail)
            self.fail(e.message)
        except Exception:
            logger.exception("Unexpected analysis failure")
            self.fail(UNKNOWN_ERROR_MESSAGE)
        else:
            self.complete(data)
        return self._status

    def start_demo(self) -> None:
        self.begin_analysis()
        self._demo_due = self._clock() + self.demo_delay

    @property
    def demo_pending(self) -> bool:
        return self._demo_due is not None

    def _to_idle(self) -> None:
        self._demo_due = None
        self._status = AnalysisStatus.IDLE
        self._data = None
        self.error_message = None

    def retry(self) -> None:
        self._to_idle()

    def reset(self) -> None:
        self._to_idle()

    # --- navigation / admin gate ---

    @property
    def visible_view(self) -> AppView:
        # Never show admin content to a non-admin, whatever ``view`` says
        if self.view is AppView.ADMIN and not self.is_admin:
            return AppView.LOGIN
        return self.view

    def open_admin(self) -> AppView:
        self.view = AppView.ADMIN if self.is_admin else AppView.LOGIN
        return self.view

    def login(self, credential: str) -> bool:
        if self._auth.verify(credential):
            self.is_admin = True
            self.login_error = None
            self.view = AppView.ADMIN
            return True
        # A wrong attempt never revokes an admin session that is already open
        if not self.is_admin:
            self.login_error = LOGIN_ERROR_MESSAGE
            self.view = AppView.LOGIN
        return False

    def cancel_login(self) -> None:
        self.login_error = None
        self.view = AppView.ANALYSIS

    def show_analysis(self) -> None:
        self.view = AppView.ANALYSIS

    def logout(self) -> None:
        self.is_admin = False
        self.login_error = None
        self.view = AppView.ANALYSIS
        self.reset()

    def load_report(self, report: Union[SavedReport, DashboardData]) -> None:
        data = report.data if isinstance(report, SavedReport) else report
        self.complete(data)
        self.view = AppView.ANALYSIS


class SessionRegistry:
    """Server-side store of SessionControllers, keyed by an opaque session id."""

    def __init__(self, factory: Callable[[], SessionController], max_sessions: int = 1000):
        self._factory = factory
        self._max = max_sessions
        self._sessions: "OrderedDict[str, SessionController]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def new_id() -> str:
        return secrets.token_urlsafe(24)

    def get(self, sid: Optional[str]) -> Optional[SessionController]:
        if not sid:
            return None
        with self._lock:
            ctl = self._sessions.get(sid)
            if ctl is not None:
                self._sessions.move_to_end(sid)
            return ctl

    def create(self) -> "tuple[str, SessionController]":
        sid = self.new_id()
        ctl = self._factory()
        with self._lock:
            self._sessions[sid] = ctl
            while len(self._sessions) > self._max:
                self._sessions.popitem(last=False)
        return sid, ctl

    def __len__(self) -> int:
        return len(self._sessions)
