"""sheet-cleaner: Learn to read messy vendor spreadsheets."""

from sheet_cleaner.matching import Dictionaries, match, normalize_size
from sheet_cleaner.reconcile import ReconciliationController
from sheet_cleaner.schema import ParsedRow, SheetData
from sheet_cleaner.session import CleaningSession

__version__ = "0.1.0"

__all__ = [
    "CleaningSession",
    "Dictionaries",
    "ParsedRow",
    "ReconciliationController",
    "SheetData",
    "match",
    "normalize_size",
    "__version__",
]
