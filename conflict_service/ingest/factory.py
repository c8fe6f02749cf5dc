"""
Parser Factory
==============

Factory functions for document parsing.
"""

import mimetypes
from typing import Optional

from .base import DocumentParser, ParseResult, UnsupportedFormatError
from .txt import TXTParser
from ..schemas import DocumentType


# Initialize parsers
_txt_parser = TXTParser()

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# MIME type to parser mapping
_parsers = {mime: _txt_parser for mime in _txt_parser.supported_mimes}


def detect_mime_type(filename: str, data: bytes = None) -> str:
    """
    Detect MIME type from filename and optionally file content.

    Args:
        filename: File name
        data: Optional file content for magic number detection

    Returns:
        MIME type string
    """
    # Fallback extension mapping first: mimetypes differs between platforms for .md
    ext = filename.lower().split('.')[-1] if '.' in filename else ''

    ext_mapping = {
        'txt': 'text/plain',
        'csv': 'text/csv',
        'md': 'text/markdown',
        'markdown': 'text/markdown',
        'docx': DOCX_MIME,
        'pdf': 'application/pdf',
    }

    if ext in ext_mapping:
        return ext_mapping[ext]

    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type:
        return mime_type

    # Try magic numbers if data provided
    if data:
        if data[:4] == b'%PDF':
            return 'application/pdf'
        if data[:4] == b'PK\x03\x04' and b'word/' in data[:2000]:
            return DOCX_MIME

    return 'application/octet-stream'


def document_type(filename: str) -> DocumentType:
    """Classify an upload by file name: .pdf, .docx, everything else is txt"""
    name = filename.lower()
    if name.endswith('.pdf'):
        return DocumentType.PDF
    if name.endswith('.docx'):
        return DocumentType.DOCX
    return DocumentType.TXT


def get_parser(mime_type: str) -> Optional[DocumentParser]:
    """
    Get parser for MIME type.

    Args:
        mime_type: MIME type string

    Returns:
        DocumentParser or None if not supported
    """
    return _parsers.get(mime_type.lower())


def parse_document(
    data: bytes,
    filename: str,
    mime_type: str = None
) -> ParseResult:
    """
    Parse document with appropriate parser.

    Automatically detects MIME type if not provided.

    Args:
        data: Document bytes
        filename: Original filename
        mime_type: Optional MIME type (auto-detected if not provided)

    Returns:
        ParseResult with extracted text

    Raises:
        UnsupportedFormatError: If format not supported
        ParserError: If parsing fails
    """
    if not mime_type:
        mime_type = detect_mime_type(filename, data)

    mime_type = mime_type.lower()

    parser = get_parser(mime_type)

    if parser is None:
        raise UnsupportedFormatError(
            f"Unsupported file format: {mime_type}. "
            f"Supported: {list(_parsers.keys())}"
        )

    return parser.parse(data, filename, mime_type=mime_type)


def is_supported(mime_type: str) -> bool:
    """Check if MIME type is supported"""
    return mime_type.lower() in _parsers


def list_supported_formats() -> dict:
    """List all supported formats"""
    return {
        "text": ["text/plain", "text/csv", "text/markdown", "text/x-markdown"],
        "word": [DOCX_MIME],
        "pdf": ["application/pdf"],
    }
