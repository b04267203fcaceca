## routes.py
from __future__ import annotations

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from adinsight_web.config.backend_config import REPORTS_TABLE_SQL, BackendConfigStore, dashboard_link
from adinsight_web.domain.errors import STORAGE_ERRORS, CloudUnavailable, ValidationError
from adinsight_web.domain.models import KPI_KEYS, AnalysisStatus, AppView
from adinsight_web.repositories.report_repository import ReportGateway, default_report_title, filter_reports
from adinsight_web.services.analysis_service import AnalysisService
from adinsight_web.services.demo_data import SAMPLE_DATA
from adinsight_web.services.session_controller import SessionController, SessionRegistry

ANALYSIS_TEMPLATES = {
    AnalysisStatus.IDLE: "input.html",
    AnalysisStatus.ANALYZING: "loading.html",
    AnalysisStatus.ERROR: "error.html",
    AnalysisStatus.COMPLETE: "dashboard.html",
}


def _mask(key: str) -> str:
    key = key or ""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"


def create_blueprint(
    analysis_service: AnalysisService,
    report_gateway: ReportGateway,
    config_store: BackendConfigStore,
    sessions: SessionRegistry,
) -> Blueprint:
    bp = Blueprint("web", __name__)

    def controller() -> SessionController:
        ctl = sessions.get(session.get("sid"))
        if ctl is None:
            sid, ctl = sessions.create()
            session["sid"] = sid
        return ctl

    def admin_controller() -> SessionController:
        ctl = controller()
        if not ctl.is_admin:
            abort(403)
        return ctl

    def render_analysis(ctl: SessionController, raw_data: str = ""):
        status = ctl.status
        data = ctl.data
        if status is AnalysisStatus.COMPLETE and data is None:
            # COMPLETE without data is not renderable; fall back to input
            ctl.reset()
            status = ctl.status
        return render_template(
            ANALYSIS_TEMPLATES[status],
            status=status.value,
            data=data,
            kpi_keys=KPI_KEYS,
            error_message=ctl.error_message,
            is_admin=ctl.is_admin,
            raw_data=raw_data,
            default_title=default_report_title(),
        )

    @bp.get("/")
    def index():
        ctl = controller()
        view = ctl.visible_view
        if view is AppView.LOGIN:
            return render_template("login.html", error=ctl.login_error, is_admin=False)
        if view is AppView.ADMIN:
            return redirect(url_for("web.admin"))
        return render_analysis(ctl)

    @bp.get("/sample")
    def sample():
        ctl = controller()
        ctl.show_analysis()
        ctl.reset()
        return render_analysis(ctl, raw_data=SAMPLE_DATA)

    @bp.post("/analyze")
    def analyze():
        ctl = controller()
        ctl.show_analysis()
        raw_data = request.form.get("raw_data") or ""
        if not raw_data.strip():
            flash("분석할 데이터를 입력해주세요.", "error")
            return redirect(url_for("web.index"))

        status = ctl.submit(raw_data, analysis_service.analyze)
        current_app.logger.info("Analysis finished status=%s chars=%d", status.value, len(raw_data))
        return redirect(url_for("web.index"))

    @bp.post("/demo")
    def demo():
        ctl = controller()
        ctl.show_analysis()
        ctl.start_demo()
        return redirect(url_for("web.index"))

    @bp.post("/reset")
    def reset():
        controller().reset()
        return redirect(url_for("web.index"))

    @bp.post("/retry")
    def retry():
        controller().retry()
        return redirect(url_for("web.index"))

    @bp.post("/view/analysis")
    def show_analysis():
        controller().show_analysis()
        return redirect(url_for("web.index"))

    # --- admin gate ---

    @bp.get("/admin")
    def admin():
        ctl = controller()
        if ctl.open_admin() is not AppView.ADMIN:
            return redirect(url_for("web.index"))

        search = (request.args.get("q") or "").strip()
        reports = []
        load_error = None
        try:
            reports = report_gateway.list_reports()
        except CloudUnavailable as e:
            current_app.logger.exception("Failed to load reports")
            load_error = e.message

        current_app.logger.info("Reports loaded: %d (mode=%s)", len(reports), report_gateway.storage_mode)

        return render_template(
            "admin.html",
            reports=filter_reports(reports, search),
            total=len(reports),
            search=search,
            load_error=load_error,
            is_cloud=config_store.is_cloud_enabled(),
            is_admin=True,
        )

    @bp.post("/login")
    def login():
        ctl = controller()
        if ctl.login(request.form.get("password") or ""):
            current_app.logger.info("Admin login")
            return redirect(url_for("web.admin"))
        current_app.logger.warning("Admin login rejected")
        return redirect(url_for("web.index"))

    @bp.post("/login/cancel")
    def cancel_login():
        controller().cancel_login()
        return redirect(url_for("web.index"))

    @bp.post("/logout")
    def logout():
        controller().logout()
        return redirect(url_for("web.index"))

    # --- saved reports ---

    @bp.post("/reports")
    def save_report():
        ctl = admin_controller()
        title = request.form.get("title") or ""
        try:
            report = report_gateway.save_report(title, ctl.data)
        except (ValidationError,) + STORAGE_ERRORS as e:
            current_app.logger.error("Save failed: %s", e.detail or e.message)
            flash(f"리포트 저장 실패: {e.message}", "alert")
        else:
            flash(f"'{report.title}' 리포트가 저장되었습니다.", "success")
        return redirect(url_for("web.index"))

    @bp.post("/reports/<report_id>/load")
    def load_report(report_id: str):
        ctl = admin_controller()
        try:
            report = report_gateway.get_report(report_id)
        except CloudUnavailable as e:
            flash(e.message, "alert")
            return redirect(url_for("web.admin"))
        if report is None:
            flash("리포트를 찾을 수 없습니다.", "alert")
            return redirect(url_for("web.admin"))
        ctl.load_report(report)
        return redirect(url_for("web.index"))

    @bp.post("/reports/<report_id>/delete")
    def delete_report(report_id: str):
        admin_controller()
        try:
            report_gateway.delete_report(report_id)
        except STORAGE_ERRORS as e:
            current_app.logger.error("Delete failed: %s", e.detail or e.message)
            flash(f"삭제 중 오류가 발생했습니다. {e.message}", "alert")
        return redirect(url_for("web.admin"))

    # --- backend settings ---

    @bp.get("/admin/database")
    def database():
        admin_controller()
        cfg = config_store.resolve_config()
        return render_template(
            "database.html",
            config=cfg,
            url=cfg.url if cfg else "",
            masked_key=_mask(cfg.key) if cfg else "",
            is_env_managed=bool(cfg and cfg.is_env_managed),
            dashboard_link=dashboard_link(cfg.url) if cfg else None,
            table_sql=REPORTS_TABLE_SQL,
            is_admin=True,
        )

    @bp.post("/admin/database")
    def save_database():
        admin_controller()
        cfg = config_store.resolve_config()
        if cfg and cfg.is_env_managed:
            flash("환경 변수로 설정된 연결은 변경할 수 없습니다.", "alert")
            return redirect(url_for("web.database"))
        try:
            config_store.save_local_config(request.form.get("url") or "", request.form.get("key") or "")
        except ValidationError as e:
            flash(e.message, "alert")
            return redirect(url_for("web.database"))
        except STORAGE_ERRORS as e:
            flash(e.message, "alert")
            return redirect(url_for("web.database"))
        flash("데이터베이스 연결이 저장되었습니다.", "success")
        return redirect(url_for("web.admin"))

    @bp.post("/admin/database/clear")
    def clear_database():
        admin_controller()
        cfg = config_store.resolve_config()
        if cfg and cfg.is_env_managed:
            flash("환경 변수로 설정된 연결은 해제할 수 없습니다. 배포 환경 설정을 확인하세요.", "alert")
            return redirect(url_for("web.database"))
        try:
            config_store.clear_local_config()
        except STORAGE_ERRORS as e:
            flash(e.message, "alert")
            return redirect(url_for("web.database"))
        flash("연결이 해제되었습니다. 로컬 저장소 모드로 전환됩니다.", "success")
        return redirect(url_for("web.admin"))

    @bp.get("/healthz")
    def healthz():
        return jsonify(status="ok", storage=report_gateway.storage_mode)

    return bp
