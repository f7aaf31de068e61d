"""JSON document file shared by the repositories: whole-file load and atomic replace."""
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock = threading.RLock()

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.exception("Could not parse %s", self.path)
            data = None
        if not isinstance(data, dict):
            self._quarantine()
            return {}
        return data

    def _quarantine(self) -> Path:
        '''Moves an unreadable store aside so the next save does not overwrite its records.'''
        target = self.path.with_name(f"{self.path.name}.{datetime.now():%Y%m%d%H%M%S%f}.corrupt")
        with self.lock:
            if not self.path.exists():
                return target
            os.replace(self.path, target)
        logger.warning("Moved corrupt store %s to %s; starting from an empty store", self.path, target)
        return target

    def save(self, data: Dict[str, Any]) -> None:
        # temp file + replace so a crash never leaves a half-written store
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.stem, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
