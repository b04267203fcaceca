from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from adinsight_web.adapters.llm_gemini import GeminiClient, LlmClient
from adinsight_web.adapters.supabase_reports import SupabaseReportTable
from adinsight_web.config.backend_config import BackendConfigStore
from adinsight_web.config.ini_config import AppSettings, IniConfig
from adinsight_web.domain.models import BackendConfig
from adinsight_web.repositories.local_store import LocalKeyValueStore
from adinsight_web.repositories.report_repository import LocalReportStore, ReportGateway
from adinsight_web.services.admin_auth import AdminAuthenticator, SharedSecretAuthenticator
from adinsight_web.services.analysis_service import AnalysisService
from adinsight_web.services.session_controller import SessionController, SessionRegistry
from adinsight_web.web.routes import create_blueprint


def _remote_table(cfg: BackendConfig) -> SupabaseReportTable:
    return SupabaseReportTable(url=cfg.url, key=cfg.key)


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    llm_factory: Optional[Callable[[str], LlmClient]] = None,
    remote_factory: Optional[Callable[[BackendConfig], SupabaseReportTable]] = None,
    authenticator: Optional[AdminAuthenticator] = None,
    clock: Optional[Callable[[], float]] = None,
) -> Flask:
    """
    Composition root: builds settings, stores, services and the blueprint.
    Every collaborator can be swapped for tests.
    """
    if settings is None:
        load_dotenv()
        settings = IniConfig.from_env_or_default().load_settings()

    kv = LocalKeyValueStore(settings.data_file)
    config_store = BackendConfigStore(kv, environ=environ)

    report_gateway = ReportGateway(
        config_store=config_store,
        local_reports=LocalReportStore(kv),
        remote_factory=remote_factory or _remote_table,
    )

    analysis_service = AnalysisService(
        api_key=settings.gemini_api_key,
        llm_factory=llm_factory or partial(GeminiClient, model=settings.gemini_model),
        temperature=settings.gemini_temperature,
    )

    auth = authenticator or SharedSecretAuthenticator(settings.admin_password)
    controller_kwargs = {"demo_delay": settings.demo_delay_seconds}
    if clock is not None:
        controller_kwargs["clock"] = clock
    sessions = SessionRegistry(lambda: SessionController(auth, **controller_kwargs))

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.register_blueprint(create_blueprint(analysis_service, report_gateway, config_store, sessions))

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    if not app.debug:
        app.logger.setLevel(logging.INFO)
    app.logger.info(
        "AdInsight ready: storage=%s model=%s data_file=%s",
        report_gateway.storage_mode,
        settings.gemini_model,
        settings.data_file,
    )

    return app
