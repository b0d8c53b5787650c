"""Approximate page segmentation of extracted text.

Extracted plain text does not keep the original page breaks, so pages are
estimated by splitting the line list into equal chunks, one per reported
page. Results near page boundaries are therefore approximate.
"""

import math
from typing import List, Optional

from .errors import InvalidMetadataError, MissingArgumentError
from .loader import DocumentContent


def lines_per_page(total_lines: int, page_count: int) -> int:
    """Number of lines assigned to each estimated page.

    Raises:
        InvalidMetadataError: If the document reports zero pages
    """
    if page_count <= 0:
        raise InvalidMetadataError(
            "Document reports 0 pages; cannot estimate page boundaries"
        )
    return math.ceil(total_lines / page_count)


def _slice_lines(lines: List[str], start: int, end: int) -> str:
    # Clamp so negative bounds never wrap around to the end of the list
    start = max(start, 0)
    end = max(end, 0)
    return "\n".join(lines[start:end])


def extract_pages(
    content: DocumentContent,
    page: Optional[int] = None,
    start_page: Optional[int] = None,
    end_page: Optional[int] = None,
) -> str:
    """Return the text of one estimated page or of an inclusive page range.

    ``page`` takes precedence over the range. Pages outside the document and
    reversed ranges give an empty string.

    Args:
        content: Loaded document
        page: 1-based page number
        start_page: First page of the range (1-based)
        end_page: Last page of the range (1-based, inclusive)

    Returns:
        Newline-joined lines of the selected pages

    Raises:
        MissingArgumentError: If neither a page nor a full range is given
        InvalidMetadataError: If the document reports zero pages
    """
    if page is None and (start_page is None or end_page is None):
        raise MissingArgumentError(
            "Must specify either 'page' or both 'startPage' and 'endPage'"
        )

    lines = content.text.split("\n")
    per_page = lines_per_page(len(lines), content.metadata.pages)

    if page is not None:
        return _slice_lines(lines, (page - 1) * per_page, page * per_page)
    return _slice_lines(lines, (start_page - 1) * per_page, end_page * per_page)
