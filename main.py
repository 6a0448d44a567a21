"""
FastAPI endpoints for certificate name verification.
"""
import importlib.util
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, HTTPException, Request, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from audit_log import AuditLog
from cert_store import CertRecord, CertStore
from config import Settings
from model import verify_text, verify_upload
from normalizer import normalize_name
from ocr_engine import IMAGE_EXTENSIONS

ALLOWED_EXTENSIONS = {".pdf"} | IMAGE_EXTENSIONS
ADMIN_COOKIE = "admin_auth"

router = APIRouter()


class InputError(ValueError):
    """Bad request data detected at the HTTP boundary."""


class TextVerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    filename: str = ""
    extracted_text: str = Field(default="", alias="extractedText")


class CertificateIn(BaseModel):
    id: Optional[str] = None
    name: str = ""
    eligibility: bool = False
    hash: Optional[str] = None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> CertStore:
    return request.app.state.store


def get_audit(request: Request) -> AuditLog:
    return request.app.state.audit


def require_verify_key(request: Request, x_verify_key: Optional[str] = Header(None)):
    required = get_settings(request).verify_key
    if required and x_verify_key != required:
        raise HTTPException(401, "Unauthorized")


def require_admin(request: Request):
    if request.cookies.get(ADMIN_COOKIE) != "1":
        raise HTTPException(401, "Unauthorized")


def _check_upload(filename: str, raw: bytes) -> None:
    if not filename:
        raise InputError("File required")
    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise InputError("Unsupported file type. Use PDF or image files.")
    if not raw:
        raise InputError("Empty file")
    if ext == ".pdf" and not raw.startswith(b"%PDF-"):
        raise InputError("Invalid PDF file")


def _log_failure(audit: AuditLog, message: str, name: str, filename: Optional[str]) -> None:
    logging.error("Verification error: %s", message)
    audit.append({"error": message, "input": {"name": name, "file": filename}})


@router.post("/verify", dependencies=[Depends(require_verify_key)])
async def verify(
    name: str = Form(""),
    email: str = Form(""),
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    store: CertStore = Depends(get_store),
    audit: AuditLog = Depends(get_audit),
):
    filename = file.filename if file else ""
    try:
        raw = await file.read() if file else b""
        _check_upload(filename, raw)
        # OCR and retry backoff block, so run the pipeline off the event loop.
        return await run_in_threadpool(
            verify_upload,
            raw,
            name,
            filename,
            certs=store.list_certificates(),
            email=email,
            audit=audit,
            ocr_attempts=settings.ocr_attempts,
            ocr_backoff=settings.ocr_backoff_seconds,
        )
    except ValueError as e:
        _log_failure(audit, str(e), name, filename or None)
        raise HTTPException(400, str(e))


@router.post("/verify/text", dependencies=[Depends(require_verify_key)])
def verify_client_text(
    body: TextVerifyRequest,
    store: CertStore = Depends(get_store),
    audit: AuditLog = Depends(get_audit),
):
    return verify_text(
        body.name,
        body.extracted_text,
        certs=store.list_certificates(),
        filename=body.filename,
        email=body.email,
        audit=audit,
    )


@router.get("/certificates")
def list_certificates(store: CertStore = Depends(get_store)):
    return {"certificates": [c.to_dict() for c in store.list_certificates()]}


@router.post("/certificates")
def create_certificate(body: CertificateIn, store: CertStore = Depends(get_store)):
    if not body.name.strip():
        raise HTTPException(400, "name required")
    cert = CertRecord(
        id=body.id or f"CERT-{secrets.token_hex(4).upper()}",
        name=normalize_name(body.name),
        eligibility=body.eligibility,
        hash=body.hash or None,
    )
    store.add(cert)
    return {"ok": True, "cert": cert.to_dict()}


@router.delete("/certificates/{cert_id}")
def delete_certificate(cert_id: str, store: CertStore = Depends(get_store)):
    if store.find_by_id(cert_id) is None:
        raise HTTPException(404, "Certificate not found")
    remaining = store.remove(cert_id)
    return {"ok": True, "certificates": [c.to_dict() for c in remaining]}


@router.post("/admin/login")
def admin_login(response: Response, password: str = Form(""), settings: Settings = Depends(get_settings)):
    if not secrets.compare_digest(password, settings.admin_password):
        failed = JSONResponse({"detail": "Invalid password"}, status_code=401)
        failed.delete_cookie(ADMIN_COOKIE, path="/")
        return failed
    response.set_cookie(ADMIN_COOKIE, "1", path="/", httponly=True, samesite="lax")
    return {"ok": True}


@router.post("/admin/logout")
def admin_logout(response: Response):
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return {"ok": True}


@router.get("/admin/audit-log", dependencies=[Depends(require_admin)])
def audit_log(audit: AuditLog = Depends(get_audit)):
    return {"logs": audit.read()}


def _available(module: str) -> str:
    return "available" if importlib.util.find_spec(module) is not None else "unavailable"


@router.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dependencies": {
            "pdfplumber": _available("pdfplumber"),
            "pymupdf": _available("fitz"),
            "paddleocr": _available("paddleocr"),
        },
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Certificate Verification API", version="1.0")
    app.state.settings = settings
    app.state.store = CertStore(settings.certificates_path, seed=settings.seed_sample_certificates)
    app.state.audit = AuditLog(settings.audit_log_path)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
