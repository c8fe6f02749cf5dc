"""
Tests for Upload Decoding
=========================

Tests:
1. MIME detection and document type
2. Text decoding with encoding detection
3. Unsupported formats
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conflict_service.ingest import (
    ParserError,
    TXTParser,
    UnsupportedFormatError,
    detect_mime_type,
    document_type,
    is_supported,
    list_supported_formats,
    parse_document,
)
from conflict_service.ingest.base import normalize_text
from conflict_service.ingest.factory import DOCX_MIME
from conflict_service.schemas import DocumentType


class TestMimeDetection:
    """Tests for MIME type detection"""

    def test_known_extensions(self):
        assert detect_mime_type("policy.txt") == "text/plain"
        assert detect_mime_type("notes.MD") == "text/markdown"
        assert detect_mime_type("handbook.pdf") == "application/pdf"
        assert detect_mime_type("syllabus.docx") == DOCX_MIME

    def test_magic_bytes(self):
        assert detect_mime_type("upload", b"%PDF-1.4 ...") == "application/pdf"

    def test_unknown(self):
        assert detect_mime_type("upload", b"\x00\x01\x02") == "application/octet-stream"

    def test_document_type_from_name(self):
        assert document_type("Handbook.PDF") == DocumentType.PDF
        assert document_type("syllabus.docx") == DocumentType.DOCX
        assert document_type("notes.md") == DocumentType.TXT
        assert document_type("README") == DocumentType.TXT

    def test_supported_formats(self):
        assert is_supported("text/plain")
        assert is_supported("APPLICATION/PDF")
        assert not is_supported("image/png")
        assert DOCX_MIME in list_supported_formats()["word"]

    def test_every_decoder_mime_is_supported(self):
        """The MIME map is built from what the text decoder accepts"""
        for mime in TXTParser().supported_mimes:
            assert is_supported(mime)


class TestDecoding:
    """Tests for text decoding"""

    def test_utf8(self):
        result = parse_document("Attendance is required.".encode("utf-8"), "policy.txt")

        assert result.full_text == "Attendance is required."
        assert result.encoding == "utf-8"
        assert result.mime_type == "text/plain"
        assert not result.is_empty

    def test_normalizes_line_endings_and_bom(self):
        data = "\ufeffFirst line\r\nSecond\u200b line\r".encode("utf-8")
        result = TXTParser().parse(data, "policy.txt")
        assert result.full_text == "First line\nSecond line"

    def test_non_utf8_falls_back(self):
        data = "Café policy: résumé due by 10 PM. Entrée fee is required.".encode("latin-1")
        result = TXTParser().parse(data, "policy.txt")

        assert result.encoding != "utf-8" or "\ufffd" in result.full_text
        assert "policy" in result.full_text

    def test_pdf_bytes_go_through_text_decoder(self):
        result = parse_document(b"%PDF-1.4 Students must attend.", "handbook.pdf")

        assert result.mime_type == "application/pdf"
        assert "Students must attend." in result.full_text

    def test_empty_upload(self):
        result = parse_document(b"", "empty.txt")
        assert result.is_empty

    def test_none_is_error(self):
        with pytest.raises(ParserError):
            TXTParser().parse(None)

    def test_normalize_text_empty(self):
        assert normalize_text("") == ""


class TestUnsupported:
    """Tests for rejected uploads"""

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFormatError):
            parse_document(b"\x89PNG\r\n", "scan.png")

    def test_unsupported_is_parser_error(self):
        assert issubclass(UnsupportedFormatError, ParserError)
