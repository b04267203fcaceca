########## ini_config.py

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

INI_DEFAULT_NAME = "adinsight.ini"

# First non-empty wins
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")
ADMIN_PASSWORD_ENV_VAR = "ADINSIGHT_ADMIN_PASSWORD"


@dataclass(frozen=True)
class AppSettings:
    data_file: Path

    gemini_api_key: str
    gemini_model: str
    gemini_temperature: float

    demo_delay_seconds: float
    admin_password: str

    flask_host: str
    flask_port: int
    flask_debug: bool
    secret_key: str


class IniConfig:
    """
    Adapter around ConfigParser and filesystem resolution.
    Keeps INI handling out of the app/service code.
    """

    def __init__(self, ini_path: Path, environ: Optional[Mapping[str, str]] = None):
        self._ini_path = ini_path
        self._environ = os.environ if environ is None else environ
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _env(self, *names: str) -> str:
        for name in names:
            value = (self._environ.get(name) or "").strip()
            if value:
                return value
        return ""

    def _cfg_path(self, section: str, key: str, default: str) -> Path:
        """
        Reads a filesystem path from INI. Relative paths are taken relative
        to the INI file, not the working directory.
        """
        raw = (self._cfg.get(section, key, fallback=default) or "").strip() or default
        raw = os.path.expandvars(os.path.expanduser(raw))
        p = Path(raw)
        if not p.is_absolute():
            p = self._ini_path.resolve().parent / p
        return p.resolve()

    def load_settings(self) -> AppSettings:
        # Storage
        data_file = self._cfg_path("storage", "data_file", "data/adinsight_store.json")

        # Gemini: environment beats INI for the key
        gemini_api_key = self._env(*API_KEY_ENV_VARS) or (self._cfg.get("gemini", "api_key", fallback="") or "").strip()
        gemini_model = (self._cfg.get("gemini", "model", fallback="gemini-2.5-flash") or "").strip() or "gemini-2.5-flash"
        gemini_temperature = self._cfg.getfloat("gemini", "temperature", fallback=0.2)

        # Demo + admin gate
        demo_delay_seconds = self._cfg.getfloat("demo", "delay_seconds", fallback=1.5)
        admin_password = self._env(ADMIN_PASSWORD_ENV_VAR) or (
            self._cfg.get("admin", "password", fallback="admin1234") or ""
        ).strip() or "admin1234"

        # Flask
        flask_host = (self._cfg.get("flask", "host", fallback="127.0.0.1") or "").strip() or "127.0.0.1"
        flask_port = self._cfg.getint("flask", "port", fallback=5000)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=True)
        secret_key = self._env("FLASK_SECRET_KEY") or (self._cfg.get("flask", "secret_key", fallback="") or "").strip()

        # Validate
        if not 0.0 <= gemini_temperature <= 2.0:
            raise ValueError(f"gemini.temperature out of range: {gemini_temperature}")
        if demo_delay_seconds < 0:
            raise ValueError(f"demo.delay_seconds must be >= 0: {demo_delay_seconds}")
        if not secret_key:
            secret_key = os.urandom(24).hex()

        data_file.parent.mkdir(parents=True, exist_ok=True)

        return AppSettings(
            data_file=data_file,
            gemini_api_key=gemini_api_key,
            gemini_model=gemini_model,
            gemini_temperature=gemini_temperature,
            demo_delay_seconds=demo_delay_seconds,
            admin_password=admin_password,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            secret_key=secret_key,
        )
