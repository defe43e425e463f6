import io
from typing import Optional

import pdfplumber
from structlog import get_logger

from mietlink.core.errors import ValidationError

logger = get_logger()


def is_pdf(mime_type: Optional[str], filename: Optional[str]) -> bool:
    return (mime_type or "").lower() == "application/pdf" or (filename or "").lower().endswith(".pdf")


def extract_text(data: bytes, mime_type: Optional[str] = None, filename: Optional[str] = None) -> str:
    """Plain text of an uploaded contract: PDF pages via pdfplumber, anything else as UTF-8."""
    if not is_pdf(mime_type, filename):
        return data.decode("utf-8", errors="replace")
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.info("Unreadable contract PDF", filename=filename, error=str(e))
        raise ValidationError("The uploaded PDF could not be read") from e
    text = "\n".join(p for p in pages if p.strip())
    if not text.strip():
        # Scanned contracts without a text layer
        raise ValidationError("The uploaded PDF contains no extractable text")
    return text
