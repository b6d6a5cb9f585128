"""
Uploads ➜ text / image bytes
– PDF text via pdfplumber, stripping `(cid:N)` glyph artifacts
– suppresses verbose CropBox warnings from pdfplumber/pdfminer
– job-posting images downloaded with requests
"""
from io import BytesIO
from pathlib import Path
import re, logging, warnings, pdfplumber, requests

# silence noisy PDF logging
logging.getLogger("pdfplumber").setLevel(logging.ERROR)
logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", category=UserWarning, module="pdfminer")

_CID_RE = re.compile(r"\(cid:\d+\)")


class ExtractionError(ValueError):
    """The upload or URL did not contain what we need."""


def pdf_to_text(pdf: str | Path | bytes) -> str:
    source = BytesIO(pdf) if isinstance(pdf, (bytes, bytearray)) else pdf
    try:
        with pdfplumber.open(source) as doc:
            pages = [p.extract_text() or "" for p in doc.pages]
    except Exception as exc:
        raise ExtractionError(f"Could not read the PDF: {exc}") from exc
    text = _CID_RE.sub("", "\n".join(pages)).strip()
    if not text:
        raise ExtractionError("The PDF contains no selectable text.")
    return text


def check_image(mime_type: str | None) -> str:
    mime_type = (mime_type or "").split(";")[0].strip().lower()
    if not mime_type.startswith("image/"):
        raise ExtractionError("Please select a valid image file (e.g., PNG, JPG).")
    return mime_type


def fetch_image(url: str, timeout: float = 15) -> tuple[bytes, str]:
    """Download an image; returns ``(bytes, mime_type)``."""
    try:
        rsp = requests.get(url, timeout=timeout, headers={"User-Agent": "resume-tailor/1.0"})
        rsp.raise_for_status()
    except requests.exceptions.RequestException as exc:
        raise ExtractionError(
            "Could not load an image from this URL. The link might be broken or the site blocks "
            "downloads; try saving the image and uploading it instead."
        ) from exc
    mime_type = (rsp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not mime_type.startswith("image/"):
        raise ExtractionError("The provided URL does not point to a valid image file.")
    return rsp.content, mime_type
