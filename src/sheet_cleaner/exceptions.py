"""Custom exceptions for sheet-cleaner."""


class SheetCleanerError(Exception):
    """Base exception for sheet-cleaner."""

    pass


class EmptySheetError(SheetCleanerError):
    """Raised when an uploaded sheet has no data rows."""

    def __init__(self, message: str = "empty file"):
        super().__init__(message)


class SheetReadError(SheetCleanerError):
    """Raised when a spreadsheet file cannot be read."""

    pass


class ColumnNotFoundError(SheetCleanerError):
    """Raised when a column name is not one of the sheet headers."""

    pass


class RowNotFoundError(SheetCleanerError):
    """Raised when a row id does not exist in the session."""

    pass


class InvalidTransitionError(SheetCleanerError):
    """Raised when an action is not allowed in the current session state."""

    pass


class DictionaryNotReadyError(InvalidTransitionError):
    """Raised when analysis starts before dictionaries have been loaded."""

    pass


class UnsupportedModeError(SheetCleanerError):
    """Raised when an operation is not available for a cleaning mode."""

    pass


class SelectionError(SheetCleanerError):
    """Raised when a text selection is not part of the row's raw text."""

    pass


class PromotionError(SheetCleanerError):
    """Raised when a row cannot be promoted to a rule."""

    pass


class AliasStoreError(SheetCleanerError):
    """Raised when the alias store cannot be read or written."""

    pass


class DictionaryError(SheetCleanerError):
    """Raised when a known value cannot be changed as requested."""

    pass
