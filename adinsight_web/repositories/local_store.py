from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

REPORTS_KEY = "adinsight_reports"
BACKEND_CONFIG_KEY = "adinsight_supabase_config"


class LocalStoreError(OSError):
    """The local medium rejected a read or write."""


@dataclass
class LocalKeyValueStore:
    """
    Server-side stand-in for browser local storage: opaque JSON documents
    under fixed string keys, all kept in a single file.

    Writes go to a temp file in the same directory and are moved into place,
    so a failed write leaves the previous contents intact.
    """
    path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise LocalStoreError(f"Cannot read {self.path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as e:
            raise LocalStoreError(f"Corrupt store file {self.path}: {e}") from e
        if not isinstance(doc, dict):
            raise LocalStoreError(f"Corrupt store file {self.path}: top level is not an object")
        return doc

    def _write_all(self, doc: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".adinsight_", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise LocalStoreError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            # Raises on an unreadable file; it is never overwritten
            doc = self._read_all()
            doc[key] = value
            self._write_all(doc)

    def remove(self, key: str) -> None:
        with self._lock:
            doc = self._read_all()
            if key in doc:
                del doc[key]
                self._write_all(doc)
