"""Exceptions raised by the PDF reader components.

Every error is caught at the tool dispatch boundary and reported back to the
host as a text payload, so none of these ever terminate the server.
"""

from typing import Optional


class PDFReaderError(Exception):
    """Base class for PDF reader errors."""
    pass


class InvalidArgumentError(PDFReaderError):
    """Tool arguments are missing or have the wrong type."""
    pass


class UnknownToolError(PDFReaderError):
    """The host asked for a tool this server does not provide."""
    pass


class MissingArgumentError(PDFReaderError):
    """No page selector was supplied to a page read."""
    pass


class DownloadError(PDFReaderError):
    """A remote document could not be downloaded.

    Args:
        message: Human readable description
        status: HTTP status code of the failing response, if any
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TooManyRedirectsError(DownloadError):
    """A redirect chain exceeded the configured hop limit."""
    pass


class ParseError(PDFReaderError):
    """The fetched bytes could not be parsed as a PDF."""
    pass


class InvalidMetadataError(PDFReaderError):
    """Document metadata cannot support the requested operation."""
    pass
