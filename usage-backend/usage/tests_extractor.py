"""
Tests for PDF text extraction.
"""
from unittest import mock

from django.test import SimpleTestCase

from usage.exceptions import ExtractionError
from usage.extractor import extract_text


def _page(*words):
    page = mock.Mock()
    page.extract_words.return_value = [{"text": w} for w in words]
    return page


def _pdf(*pages):
    handle = mock.MagicMock()
    handle.__enter__.return_value.pages = list(pages)
    return handle


class ExtractTextTests(SimpleTestCase):
    def test_words_joined_by_space_pages_by_newline(self):
        fake = _pdf(_page("Store", "1020"), _page("P10002", "Chicken"))
        with mock.patch("usage.extractor.pdfplumber.open", return_value=fake) as opener:
            text = extract_text(b"%PDF-1.4 fake")
        self.assertEqual(text, "Store 1020\nP10002 Chicken")
        opener.assert_called_once()

    def test_empty_words_are_skipped(self):
        fake = _pdf(_page("Store", "", "1020"))
        with mock.patch("usage.extractor.pdfplumber.open", return_value=fake):
            self.assertEqual(extract_text(b"%PDF"), "Store 1020")

    def test_page_failure_aborts_whole_document(self):
        bad = mock.Mock()
        bad.extract_words.side_effect = ValueError("broken stream")
        fake = _pdf(_page("Store", "1020"), bad)
        with mock.patch("usage.extractor.pdfplumber.open", return_value=fake):
            with self.assertRaisesMessage(ExtractionError, "Could not decode page 2"):
                extract_text(b"%PDF")

    def test_open_failure_raises_extraction_error(self):
        with mock.patch("usage.extractor.pdfplumber.open", side_effect=OSError("not a pdf")):
            with self.assertRaises(ExtractionError):
                extract_text(b"garbage")

    def test_empty_bytes_rejected(self):
        with self.assertRaisesMessage(ExtractionError, "Empty file"):
            extract_text(b"")

    def test_invalid_pdf_bytes(self):
        with self.assertRaises(ExtractionError):
            extract_text(b"this is not a pdf document")
