"""Canonical identifiers for session recordings.

This module provides:
- IdentifierBuilder: Token formatting, sanitization, uniqueness suffix
- normalize_session_date: ISO truncation / dateparser normalization
- NamingService: Context -> resolution result + identifier
"""

from src.naming.builder import IdentifierBuilder, data_source_indicator, week_token
from src.naming.dates import normalize_session_date
from src.naming.schemas import CanonicalIdentifier
from src.naming.service import NamingOutcome, NamingService

__all__ = [
    "CanonicalIdentifier",
    "IdentifierBuilder",
    "NamingOutcome",
    "NamingService",
    "data_source_indicator",
    "normalize_session_date",
    "week_token",
]
