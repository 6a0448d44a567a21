import json

from cert_store import CertRecord, CertStore


def test_missing_file_is_empty(tmp_path):
    store = CertStore(tmp_path / "certificates.json")
    assert store.list_certificates() == []


def test_missing_file_seeds_samples(tmp_path):
    store = CertStore(tmp_path / "certificates.json", seed=True)
    ids = [c.id for c in store.list_certificates()]
    assert ids == ["CERT-HHM-20250928", "CERT-ABC-20240101"]


def test_add_find_remove_persist(tmp_path):
    path = tmp_path / "data" / "certificates.json"
    store = CertStore(path)
    store.add(CertRecord(id="CERT-1", name="JANE ROE", eligibility=True))
    store.add(CertRecord(id="CERT-2", name="BOB SMITH"))

    assert json.loads(path.read_text())[0] == {"id": "CERT-1", "name": "JANE ROE", "eligibility": True, "hash": None}
    assert CertStore(path).find_by_id("CERT-2").name == "BOB SMITH"

    remaining = store.remove("CERT-1")
    assert [c.id for c in remaining] == ["CERT-2"]
    assert [c.id for c in CertStore(path).list_certificates()] == ["CERT-2"]


def test_unreadable_file_falls_back_to_memory(tmp_path):
    path = tmp_path / "certificates.json"
    path.mkdir()
    store = CertStore(path)
    assert store.list_certificates() == []
    store.add(CertRecord(id="CERT-1", name="JANE ROE"))
    assert [c.id for c in store.list_certificates()] == ["CERT-1"]


def test_unwritable_dir_falls_back_to_memory(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = CertStore(blocker / "certificates.json")
    store.add(CertRecord(id="CERT-1", name="JANE ROE"))
    assert store.find_by_id("CERT-1") is not None


def test_from_dict_coerces_fields():
    rec = CertRecord.from_dict({"id": "X", "name": "A B", "eligibility": 1, "hash": ""})
    assert rec == CertRecord(id="X", name="A B", eligibility=True, hash=None)
