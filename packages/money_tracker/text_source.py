"""Text sources: turn receipt images and statement documents into raw text.

The OCR engine (Tesseract via ``pytesseract``) and the PDF text extractor
(PyMuPDF) are treated as black boxes. This module only adds the boundary
contract: bytes in, one ``str`` out, a bounded run time, and typed errors.

Heavy dependencies are imported lazily so importing ``money_tracker`` stays
cheap for callers that only parse or report.
"""

from __future__ import annotations

import io
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Protocol

from .config import Settings
from .errors import MalformedInputError, MoneyTrackerError, TextExtractionTimeout
from .logging_setup import get_logger

_logger = get_logger("money_tracker.text_source")

# Tesseract page segmentation mode 6: assume a single uniform block of text.
_PSM_SINGLE_BLOCK = 6


class TextSource(Protocol):
    """Anything that can produce raw text from receipt and statement bytes."""

    def image_to_text(self, data: bytes) -> str: ...

    def document_to_text(self, data: bytes) -> str: ...


def _load_image(data: bytes):
    from PIL import Image, UnidentifiedImageError

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise MalformedInputError(f"unreadable receipt image: {e}") from e
    # Grayscale tends to help Tesseract on photographed receipts.
    if img.mode != "L":
        img = img.convert("L")
    return img


def _pdf_pages_text(data: bytes) -> str:
    import fitz  # pymupdf

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:  # noqa: BLE001 - PyMuPDF raises several unrelated types
        raise MalformedInputError(f"unreadable statement document: {e}") from e
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


class OcrTextSource:
    """Default :class:`TextSource` backed by Tesseract and PyMuPDF."""

    def __init__(self, settings: Settings) -> None:
        self.lang = settings.ocr_lang
        self.ocr_timeout_sec = settings.ocr_timeout_sec
        self.pdf_timeout_sec = settings.pdf_timeout_sec

    def image_to_text(self, data: bytes) -> str:
        if not data:
            raise MalformedInputError("empty receipt image")
        img = _load_image(data)

        import pytesseract

        _logger.info("running OCR (lang=%s, timeout=%ss)", self.lang, self.ocr_timeout_sec)
        try:
            text = pytesseract.image_to_string(
                img,
                lang=self.lang,
                config=f"--psm {_PSM_SINGLE_BLOCK}",
                timeout=self.ocr_timeout_sec,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise MoneyTrackerError("Tesseract OCR engine is not installed") from e
        except pytesseract.TesseractError as e:
            raise MalformedInputError(f"OCR failed: {e}") from e
        except RuntimeError as e:
            # pytesseract signals its timeout with a bare RuntimeError.
            if "timeout" in str(e).lower():
                raise TextExtractionTimeout(
                    f"OCR exceeded {self.ocr_timeout_sec}s"
                ) from e
            raise
        _logger.debug("OCR produced %d characters", len(text))
        return text

    def document_to_text(self, data: bytes) -> str:
        if not data:
            raise MalformedInputError("empty statement document")
        ex = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mt-pdf")
        try:
            fut = ex.submit(_pdf_pages_text, data)
            try:
                text = fut.result(timeout=self.pdf_timeout_sec)
            except FuturesTimeout as e:
                raise TextExtractionTimeout(
                    f"document text extraction exceeded {self.pdf_timeout_sec}s"
                ) from e
        finally:
            # Do not block on a runaway extraction; the worker finishes on its own.
            ex.shutdown(wait=False, cancel_futures=True)
        _logger.debug("document produced %d characters", len(text))
        return text


__all__ = ["TextSource", "OcrTextSource"]
