from __future__ import annotations

import logging
import os
import re
from typing import Callable, List, Mapping, Optional, Tuple

from adinsight_web.domain.errors import LocalDeleteError, LocalWriteError, ValidationError
from adinsight_web.domain.models import BackendConfig, ConfigSource
from adinsight_web.repositories.local_store import BACKEND_CONFIG_KEY, LocalKeyValueStore, LocalStoreError

logger = logging.getLogger(__name__)

# (url var, key var) pairs, checked in order
ENV_VAR_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("SUPABASE_URL", "SUPABASE_KEY"),
    ("VITE_SUPABASE_URL", "VITE_SUPABASE_KEY"),
    ("REACT_APP_SUPABASE_URL", "REACT_APP_SUPABASE_KEY"),
)

REPORTS_TABLE_SQL = """create table reports (
  id uuid primary key default gen_random_uuid(),
  title text not null,
  date text not null,
  data jsonb not null,
  created_at timestamp with time zone default timezone('utc'::text, now())
);"""

_PROJECT_REF = re.compile(r"^https://([^.]+)\.supabase\.co")

_UNSET = object()


class BackendConfigStore:
    """
    Resolves the remote backend credentials.

    Environment variables always win over a locally saved override. The
    resolved value is cached until the local override is saved or cleared;
    listeners are told on every such change so they can drop connections
    built from the old credentials.
    """

    def __init__(self, local_store: LocalKeyValueStore, environ: Optional[Mapping[str, str]] = None):
        self._local = local_store
        self._environ = os.environ if environ is None else environ
        self._cached = _UNSET
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def invalidate(self) -> None:
        self._cached = _UNSET
        for callback in self._listeners:
            callback()

    def _env_config(self) -> Optional[BackendConfig]:
        for url_var, key_var in ENV_VAR_PAIRS:
            url = (self._environ.get(url_var) or "").strip()
            key = (self._environ.get(key_var) or "").strip()
            if url and key:
                return BackendConfig(url=url, key=key, source=ConfigSource.ENVIRONMENT)
        return None

    def _local_config(self) -> Optional[BackendConfig]:
        stored = self._local.get(BACKEND_CONFIG_KEY)
        if not isinstance(stored, dict):
            return None
        url = str(stored.get("url") or "").strip()
        key = str(stored.get("key") or "").strip()
        if not (url and key):
            return None
        return BackendConfig(url=url, key=key, source=ConfigSource.LOCAL)

    def resolve_config(self) -> Optional[BackendConfig]:
        if self._cached is _UNSET:
            try:
                resolved = self._env_config() or self._local_config()
            except LocalStoreError:
                # Not cached: the next call reads the store again
                logger.exception("Failed to read backend config from local store")
                return None
            self._cached = resolved
        return self._cached

    def is_cloud_enabled(self) -> bool:
        return self.resolve_config() is not None

    def save_local_config(self, url: str, key: str) -> None:
        url = (url or "").strip()
        key = (key or "").strip()
        if not url or not key:
            raise ValidationError("URL과 API Key를 모두 입력해주세요.")

        try:
            self._local.set(BACKEND_CONFIG_KEY, {"url": url, "key": key})
        except LocalStoreError as e:
            logger.exception("Failed to save backend config")
            raise LocalWriteError("설정을 저장하는 중 오류가 발생했습니다.", detail=str(e)) from e
        finally:
            self.invalidate()
        logger.info("Saved local backend config for %s", url)

    def clear_local_config(self) -> None:
        try:
            self._local.remove(BACKEND_CONFIG_KEY)
        except LocalStoreError as e:
            logger.exception("Failed to clear backend config")
            raise LocalDeleteError("설정을 삭제하는 중 오류가 발생했습니다.", detail=str(e)) from e
        finally:
            self.invalidate()
        logger.info("Cleared local backend config")


def dashboard_link(url: str) -> Optional[str]:
    """https://xyz.supabase.co -> the project's table editor page."""
    m = _PROJECT_REF.match((url or "").strip())
    if not m:
        return None
    return f"https://supabase.com/dashboard/project/{m.group(1)}/editor"
