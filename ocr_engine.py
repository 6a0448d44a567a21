"""
OCR engine: certificate text from the PDF text layer, falling back to PaddleOCR on rendered pages or images.
"""
import io
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List

os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "1")

import cv2
import fitz
import numpy as np
import pdfplumber
from PIL import Image

MIN_TEXT_LEN = 50
RENDER_DPI = 220
MIN_PAGE_LINES = 8
ROW_HEIGHT_PX = 18
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff"}

# (top, bottom, left, right) fractions re-read when a whole page yields few lines.
CROP_WINDOWS = {
    "tall": [(0.0, 0.62, 0.0, 1.0), (0.32, 1.0, 0.0, 1.0)],
    "wide": [(0.0, 1.0, 0.0, 0.58), (0.0, 1.0, 0.42, 1.0)],
}

_paddle = None
_paddle_error = None


class OcrUnavailableError(RuntimeError):
    pass


def _norm_lines(s: str) -> str:
    lines = (" ".join(line.split()) for line in (s or "").splitlines())
    return "\n".join(line for line in lines if line)


def _plumber_text(path: Path) -> str:
    try:
        with pdfplumber.open(path) as pdf:
            return "\n".join(page.extract_text() or "" for page in pdf.pages)
    except Exception as e:
        logging.warning("pdfplumber failed on %s: %s", path.name, e)
        return ""


def _mupdf_text(path: Path) -> str:
    try:
        with fitz.open(path) as doc:
            return "\n".join(page.get_text() for page in doc)
    except Exception as e:
        logging.warning("PyMuPDF failed on %s: %s", path.name, e)
        return ""


def pdf_has_text(path: Path, min_len: int = MIN_TEXT_LEN):
    """Return (has usable text layer, text). PyMuPDF is only consulted when pdfplumber comes up short."""
    parts = [_plumber_text(path)]
    if len(parts[0].strip()) < min_len:
        parts.append(_mupdf_text(path))
    text = _norm_lines("\n".join(p for p in parts if p.strip()))
    return len(text) >= min_len, text


def render_pages(path: Path, dpi: int = RENDER_DPI) -> Iterator[np.ndarray]:
    zoom = fitz.Matrix(dpi / 72, dpi / 72)
    with fitz.open(path) as doc:
        for page in doc:
            png = page.get_pixmap(matrix=zoom, alpha=False).tobytes("png")
            yield np.array(Image.open(io.BytesIO(png)).convert("RGB"))


def enhance(img_rgb: np.ndarray) -> np.ndarray:
    gray = cv2.medianBlur(cv2.cvtColor(img_rgb, cv2.COLOR_RGB2GRAY), 3)
    gray = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8)).apply(gray)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2RGB)


def crops(img: np.ndarray) -> List[np.ndarray]:
    h, w = img.shape[:2]
    windows = []
    if h >= 1000:
        windows += CROP_WINDOWS["tall"]
    if w >= 1400:
        windows += CROP_WINDOWS["wide"]
    return [img[int(h * t):int(h * b), int(w * l):int(w * r)] for t, b, l, r in windows]


def reading_order(result) -> List[str]:
    """PaddleOCR boxes -> text lines, top-to-bottom then left-to-right."""
    if not result or not result[0]:
        return []
    rows = []
    for item in result[0]:
        try:
            box, (txt, _conf) = item[0], item[1]
        except (IndexError, TypeError, ValueError):
            continue
        if not txt:
            continue
        xs = [p[0] for p in box]
        ys = [p[1] for p in box]
        rows.append((round(sum(ys) / len(ys) / ROW_HEIGHT_PX), sum(xs) / len(xs), txt))
    return [txt for _, _, txt in sorted(rows, key=lambda r: (r[0], r[1]))]


def _get_ocr():
    global _paddle, _paddle_error
    if _paddle is not None:
        return _paddle
    if _paddle_error:
        raise OcrUnavailableError(_paddle_error)
    try:
        from paddleocr import PaddleOCR
    except ImportError as e:
        _paddle_error = f"PaddleOCR not installed: {e}"
        raise OcrUnavailableError(_paddle_error)
    try:
        _paddle = PaddleOCR(use_angle_cls=True, lang="en")
    except Exception as e:
        logging.warning("PaddleOCR angle classifier unavailable, retrying without: %s", e)
        try:
            _paddle = PaddleOCR(lang="en")
        except Exception as e2:
            _paddle_error = f"PaddleOCR init failed: {e2}"
            raise OcrUnavailableError(_paddle_error)
    return _paddle


def _read_image(ocr, img: np.ndarray) -> List[str]:
    img = enhance(img)
    lines = reading_order(ocr.ocr(img, cls=True))
    if len(lines) < MIN_PAGE_LINES:
        for part in crops(img):
            lines += reading_order(ocr.ocr(part, cls=True))
    return list(dict.fromkeys(lines))


def run_ocr(path: Path) -> str:
    ocr = _get_ocr()
    pages = ["\n".join(_read_image(ocr, page)) for page in render_pages(path)]
    return _norm_lines("\n".join(pages))


def run_ocr_image(path: Path) -> str:
    ocr = _get_ocr()
    img = np.array(Image.open(path).convert("RGB"))
    return _norm_lines("\n".join(_read_image(ocr, img)))


def run_with_retry(fn: Callable[[Path], str], path: Path, attempts: int = 2, backoff: float = 0.25) -> str:
    """Call an OCR function up to `attempts` times with linear backoff; raise OcrUnavailableError on exhaustion."""
    last_error = None
    for i in range(attempts):
        try:
            return fn(path)
        except Exception as e:
            last_error = e
            logging.warning("OCR attempt %d/%d failed for %s: %s", i + 1, attempts, path.name, e)
        if i < attempts - 1:
            time.sleep(backoff * (i + 1))
    raise OcrUnavailableError(f"OCR unavailable after {attempts} attempts: {last_error}")


def _debug(**overrides) -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "has_pdf_text": False,
        "pdf_text_length": 0,
        "ocr_attempted": False,
        "ocr_error": None,
        "ocr_text_length": 0,
        "source": "pdf-text",
    }
    info.update(overrides)
    return info


def get_pdf_text_debug(path: Path, attempts: int = 2, backoff: float = 0.25) -> Dict[str, Any]:
    has_text, text = pdf_has_text(path, MIN_TEXT_LEN)
    debug = _debug(has_pdf_text=has_text, pdf_text_length=len(text))
    if has_text:
        return {"text": text, "debug": debug}

    debug["ocr_attempted"] = True
    fallback = "pdf-text" if text.strip() else "pdf-no-text"
    try:
        ocr_text = run_with_retry(run_ocr, path, attempts, backoff)
    except OcrUnavailableError as e:
        debug.update(ocr_error=str(e), source=fallback)
        return {"text": text, "debug": debug}

    debug["ocr_text_length"] = len(ocr_text)
    if not ocr_text.strip():
        debug["source"] = fallback
        return {"text": text, "debug": debug}
    debug["source"] = "pdf-ocr"
    return {"text": _norm_lines(f"{text}\n{ocr_text}"), "debug": debug}


def get_document_text_debug(path: Path, attempts: int = 2, backoff: float = 0.25) -> Dict[str, Any]:
    ext = path.suffix.lower()
    if ext == ".pdf":
        return get_pdf_text_debug(path, attempts, backoff)
    if ext not in IMAGE_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {ext}")

    debug = _debug(ocr_attempted=True, source="image-ocr")
    try:
        text = run_with_retry(run_ocr_image, path, attempts, backoff)
    except OcrUnavailableError as e:
        debug.update(ocr_error=str(e), source="image-ocr-failed")
        return {"text": "", "debug": debug}
    debug["ocr_text_length"] = len(text)
    return {"text": text, "debug": debug}
