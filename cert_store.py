"""
Certificate store: JSON file of known certificates, falling back to memory when the disk is unusable.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from normalizer import normalize_name


@dataclass
class CertRecord:
    id: str
    name: str
    eligibility: bool = False
    hash: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CertRecord":
        return cls(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            eligibility=bool(raw.get("eligibility")),
            hash=raw.get("hash") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SAMPLE_CERTIFICATES = [
    CertRecord(id="CERT-HHM-20250928", name=normalize_name("HEET HITESH MEHTA"), eligibility=True),
    CertRecord(id="CERT-ABC-20240101", name=normalize_name("ALICE BOB"), eligibility=False),
]


class CertStore:
    def __init__(self, path: Path, seed: bool = False):
        self.path = Path(path)
        self.seed = seed
        self._memory: Optional[List[CertRecord]] = None
        self._memory_only = False

    def _fallback(self, reason: str, records: List[CertRecord]) -> None:
        logging.warning("cert-store: %s, using in-memory store", reason)
        self._memory_only = True
        self._memory = records

    def list_certificates(self) -> List[CertRecord]:
        if self._memory is not None:
            return list(self._memory)
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            self._memory = [CertRecord.from_dict(r) for r in raw if isinstance(r, dict)]
        except FileNotFoundError:
            self._memory = [CertRecord(**asdict(c)) for c in SAMPLE_CERTIFICATES] if self.seed else []
        except (OSError, ValueError) as e:
            self._fallback(f"cannot read {self.path} ({e})", [])
        return list(self._memory)

    def write(self, records: List[CertRecord]) -> None:
        if self._memory_only:
            self._memory = list(records)
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps([r.to_dict() for r in records], indent=2), encoding="utf-8")
            self._memory = list(records)
        except OSError as e:
            self._fallback(f"cannot write {self.path} ({e})", list(records))

    def add(self, record: CertRecord) -> CertRecord:
        records = self.list_certificates()
        records.append(record)
        self.write(records)
        return record

    def find_by_id(self, cert_id: str) -> Optional[CertRecord]:
        return next((c for c in self.list_certificates() if c.id == cert_id), None)

    def remove(self, cert_id: str) -> List[CertRecord]:
        remaining = [c for c in self.list_certificates() if c.id != cert_id]
        self.write(remaining)
        return remaining
