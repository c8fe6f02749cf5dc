"""
Conflict Service - Document Conflict Detection
==============================================

A minimal, standalone service for:
1. Detecting conflicting statements between short documents
2. Describing conflicts with suggested resolutions
3. Generating downloadable conflict reports

No database, no auth required. State lives in memory only.
"""

__version__ = "1.0.0"
