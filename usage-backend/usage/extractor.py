# usage/extractor.py
"""
PDF text extraction for weekly usage reports.

Turns the uploaded bytes into one linear text stream: the words of each page
in pdfplumber's reading order joined by single spaces, pages joined by
newlines. Layout and columns are not interpreted beyond that order; the
parser works on positions within this string only.
"""

import io
import logging

import pdfplumber

from .exceptions import ExtractionError

logger = logging.getLogger(__name__)


def _page_text(page) -> str:
    words = page.extract_words(keep_blank_chars=False, use_text_flow=True)
    return " ".join(w["text"] for w in words if w.get("text"))


def extract_text(data: bytes) -> str:
    """
    Extract the text of every page of a PDF.

    Args:
        data: Raw bytes of the uploaded file

    Returns:
        Page texts joined by "\\n"

    Raises:
        ExtractionError: If the bytes are not a readable PDF or any page fails
    """
    if not data:
        raise ExtractionError("Empty file")

    pages = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for number, page in enumerate(pdf.pages, start=1):
                try:
                    pages.append(_page_text(page))
                except Exception as e:
                    raise ExtractionError(f"Could not decode page {number}: {e}") from e
    except ExtractionError:
        raise
    except Exception as e:
        logger.warning(f"PDF could not be opened: {e}")
        raise ExtractionError(f"Could not read file: {e}") from e

    text = "\n".join(pages)
    logger.debug(f"Extracted {len(pages)} pages, {len(text)} chars: {text[:2000]!r}")
    return text
