"""Library storage errors."""


class LibraryError(Exception):
    """Base exception for library store operations."""


class LibraryIOError(LibraryError):
    """Raised when a file in the library cannot be read or written."""


class GameImportError(LibraryIOError):
    """Raised when a game file cannot be copied into the library."""
