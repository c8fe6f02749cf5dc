"""
Ingest Base Types
=================

Unified output types for all parsers.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any
from dataclasses import dataclass, field


class ParserError(Exception):
    """Base exception for parser errors"""
    pass


class UnsupportedFormatError(ParserError):
    """File format not supported"""
    pass


@dataclass
class ParseResult:
    """
    Unified result from any parser.

    full_text is what the detector sees.
    """
    full_text: str
    mime_type: str
    encoding: str = "utf-8"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.full_text.strip()


class DocumentParser(ABC):
    """
    Abstract base class for document parsers.
    """

    @property
    @abstractmethod
    def supported_mimes(self) -> List[str]:
        """List of supported MIME types"""
        pass

    @abstractmethod
    def parse(self, data: bytes, filename: str = None) -> ParseResult:
        """
        Parse document data.

        Args:
            data: Binary document data
            filename: Optional filename for type hints

        Returns:
            ParseResult with full text
        """
        pass


def normalize_text(text: str) -> str:
    """
    Normalize decoded text.

    - Normalize line endings
    - Remove zero-width characters and BOM
    """
    if not text:
        return ""

    text = text.replace('\r\n', '\n').replace('\r', '\n')

    text = text.replace('\u200b', '')  # Zero-width space
    text = text.replace('\ufeff', '')  # BOM

    return text.strip()
