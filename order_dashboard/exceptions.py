"""Domain exceptions for the order dashboard.

All exceptions inherit from DashboardError so callers can catch any
dashboard failure in one place. None of them are fatal: they are signals
to the caller (usually the HTTP layer) about what could not be done.
"""


class DashboardError(Exception):
    """Base exception for all order dashboard errors."""

    pass


class UnsupportedFileTypeError(DashboardError):
    """Raised when an upload is not a .csv, .xlsx or .xls file."""

    pass


class FileDecodeError(DashboardError):
    """Raised when a supported file cannot be read into rows."""

    pass


class NoRowsError(DashboardError):
    """Raised when an upload decodes to zero data rows.

    Empty uploads are rejected before aggregation instead of producing a
    snapshot with all-zero totals.
    """

    pass


class NoDataError(DashboardError):
    """Raised when a query needs the latest upload but nothing was uploaded yet."""

    pass


class SubOrderNotFoundError(DashboardError):
    """Raised when a lookup identifier matches no row of the latest upload."""

    def __init__(self, identifier: str):
        super().__init__(f"Sub Order No not found: {identifier}")
        self.identifier = identifier
