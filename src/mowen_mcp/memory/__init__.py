"""Local note memory: the SQLite record of created notes and date queries."""

from .store import NoteRecord, NoteStore
from .periods import QUERY_TYPES, parse_date, resolve_period

__all__ = [
    'NoteRecord',
    'NoteStore',
    'QUERY_TYPES',
    'parse_date',
    'resolve_period'
]
