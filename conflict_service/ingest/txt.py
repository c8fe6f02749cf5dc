"""
TXT Parser
==========

Decodes uploaded bytes into text. PDF and DOCX uploads go through the same
decoder; their binary structure is not interpreted.
"""

from typing import List
import chardet

from .base import (
    DocumentParser,
    ParseResult,
    ParserError,
    normalize_text,
)


class TXTParser(DocumentParser):
    """
    Plain text decoder with encoding detection.
    """

    @property
    def supported_mimes(self) -> List[str]:
        return [
            "text/plain",
            "text/csv",
            "text/markdown",
            "text/x-markdown",
            "application/x-empty",
            "application/pdf",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ]

    def parse(self, data: bytes, filename: str = None, mime_type: str = "text/plain") -> ParseResult:
        """Decode bytes to text"""
        if data is None:
            raise ParserError("No data to parse")

        try:
            encoding = "utf-8"
            confidence = 1.0

            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError:
                detected = chardet.detect(data)
                encoding = detected.get('encoding') or 'utf-8'
                confidence = detected.get('confidence', 0) or 0
                try:
                    text = data.decode(encoding)
                except (UnicodeDecodeError, LookupError):
                    encoding = "utf-8"
                    text = data.decode('utf-8', errors='replace')

            text = normalize_text(text)

            return ParseResult(
                full_text=text,
                mime_type=mime_type,
                encoding=encoding,
                metadata={
                    "filename": filename,
                    "confidence": confidence,
                    "size": len(data),
                }
            )

        except Exception as e:
            raise ParserError(f"Failed to parse text file: {e}") from e
