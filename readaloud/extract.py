# readaloud/extract.py
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import List, Dict

from pypdf import PdfReader

from readaloud.cleaning import clean_text
from readaloud.errors import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class ExtractedDocument:
    text: str
    page_count: int
    filename: str = ""


def extract_pages_from_bytes(raw: bytes) -> List[Dict]:
    reader = PdfReader(io.BytesIO(raw))
    pages = []
    for i, page in enumerate(reader.pages):
        text = page.extract_text() or ""
        pages.append({"page": i + 1, "text": text})
    return pages


def extract_document(raw: bytes, filename: str = "") -> ExtractedDocument:
    """
    Turn uploaded PDF bytes into one cleaned string.
    Any parser failure (empty payload, not a PDF, broken xref...) becomes ExtractionError.
    """
    try:
        pages = extract_pages_from_bytes(raw)
    except Exception as e:
        raise ExtractionError(str(e) or e.__class__.__name__) from e

    raw_text = "\n".join(p["text"] for p in pages)
    doc = ExtractedDocument(text=clean_text(raw_text), page_count=len(pages), filename=filename)
    logger.info("Extracted %d chars from %s (%d pages)", len(doc.text), filename or "upload", doc.page_count)
    return doc
