"""
Ingest Pipeline
===============

Turns uploaded bytes into text for analysis.
"""

from .base import ParseResult, ParserError, UnsupportedFormatError
from .txt import TXTParser
from .factory import get_parser, parse_document, detect_mime_type, document_type, is_supported, list_supported_formats

__all__ = [
    # Base types
    "ParseResult", "ParserError", "UnsupportedFormatError",
    # Parsers
    "TXTParser",
    # Factory
    "get_parser", "parse_document", "detect_mime_type", "document_type", "is_supported", "list_supported_formats",
]
