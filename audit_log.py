"""
Audit log: append-only JSON list of verification attempts.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


class AuditLog:
    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> List[Dict[str, Any]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logging.warning("audit-log: cannot read %s: %s", self.path, e)
            return []
        return data if isinstance(data, list) else []

    def append(self, entry: Dict[str, Any]) -> None:
        record = {"date": datetime.now(timezone.utc).isoformat(), **entry}
        logs = self.read()
        logs.append(record)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(logs, indent=2), encoding="utf-8")
        except OSError as e:
            logging.warning("audit-log: cannot write %s: %s", self.path, e)
