"""Regnum Forum Archive — exceptions raised by the store and query layer."""


class ArchiveError(Exception):
    """Base class for archive errors."""


class NotFoundError(ArchiveError):
    """A thread or user id did not resolve to a row."""


class StoreUnavailableError(ArchiveError):
    """The store could not be opened or a query failed to execute."""
