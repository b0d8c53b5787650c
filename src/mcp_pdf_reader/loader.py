"""Document loading: PyMuPDF text extraction and the per-server document cache.

PDF parsing uses PyMuPDF (fitz). Parsed documents are cached by source
identifier for the lifetime of the owning server; the cache has no eviction
and is never invalidated, so a document that changes on disk or at its URL
keeps serving the first parsed version.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

import fitz  # PyMuPDF
from anyio import to_thread
from pydantic import BaseModel, ConfigDict, Field

from .config import ServerConfig
from .errors import ParseError
from .fetcher import fetch_source, resolve_source

logger = logging.getLogger(__name__)

# D:YYYYMMDDHHmmSSOHH'mm' where everything after the year is optional
PDF_DATE_PATTERN = re.compile(
    r"^D:(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?P<tz>[Zz+\-])?(?P<tzh>\d{2})?'?(?P<tzm>\d{2})?'?"
)

FetchFunc = Callable[[str, ServerConfig], Awaitable[bytes]]
ParseFunc = Callable[[bytes], "DocumentContent"]


class DocumentMetadata(BaseModel):
    """Coarse document information reported by the parser."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    author: Optional[str] = None
    pages: int = Field(default=0, ge=0, description="Page count reported by the parser")
    created: Optional[datetime] = None


class DocumentContent(BaseModel):
    """Extracted text and metadata of one parsed document."""

    model_config = ConfigDict(frozen=True)

    text: str
    metadata: DocumentMetadata


def parse_pdf_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a PDF date string such as ``D:20240131120000+01'00'``.

    Returns None for empty or unrecognised values.
    """
    if not value:
        return None

    match = PDF_DATE_PATTERN.match(value.strip())
    if not match:
        logger.debug("Unrecognised PDF date: %r", value)
        return None

    parts = match.groupdict()
    tz = None
    if parts["tz"] in ("Z", "z"):
        tz = timezone.utc
    elif parts["tz"] in ("+", "-"):
        offset = timedelta(hours=int(parts["tzh"] or 0), minutes=int(parts["tzm"] or 0))
        tz = timezone(offset if parts["tz"] == "+" else -offset)

    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            tzinfo=tz,
        )
    except ValueError:
        logger.debug("Invalid PDF date: %r", value)
        return None


def extract_document(pdf_content: bytes) -> DocumentContent:
    """Extract plain text and metadata from PDF bytes.

    Page texts are joined with a blank line; line breaks inside a page are
    kept as PyMuPDF reports them.

    Args:
        pdf_content: Raw PDF content as bytes

    Returns:
        Parsed document content

    Raises:
        ParseError: If PyMuPDF cannot open or read the document
    """
    try:
        doc = fitz.open(stream=pdf_content, filetype="pdf")
    except Exception as e:
        raise ParseError(f"Failed to parse PDF: {e}") from e

    try:
        page_texts = [page.get_text().rstrip("\n") for page in doc]
        info = doc.metadata or {}
        metadata = DocumentMetadata(
            title=info.get("title") or None,
            author=info.get("author") or None,
            pages=doc.page_count,
            created=parse_pdf_date(info.get("creationDate")),
        )
    except Exception as e:
        raise ParseError(f"Failed to parse PDF: {e}") from e
    finally:
        doc.close()

    return DocumentContent(text="\n\n".join(page_texts), metadata=metadata)


class DocumentCache:
    """In-memory mapping of source identifier to parsed document."""

    def __init__(self):
        self._documents: Dict[str, DocumentContent] = {}

    def get(self, source: str) -> Optional[DocumentContent]:
        return self._documents.get(source)

    def put(self, source: str, content: DocumentContent) -> None:
        self._documents[source] = content

    def clear(self) -> None:
        self._documents.clear()

    def __contains__(self, source: str) -> bool:
        return source in self._documents

    def __len__(self) -> int:
        return len(self._documents)


class DocumentLoader:
    """Load documents through the cache, fetching and parsing on a miss.

    Args:
        config: Server configuration passed to the fetch function
        cache: Cache shared by every load made through this loader
        fetch: Coroutine returning the raw bytes of a source
        parse: Function turning raw bytes into DocumentContent, run in a worker thread
    """

    def __init__(
        self,
        config: ServerConfig,
        cache: DocumentCache,
        fetch: Optional[FetchFunc] = None,
        parse: Optional[ParseFunc] = None,
    ):
        self.config = config
        self.cache = cache
        self._fetch = fetch or fetch_source
        self._parse = parse or extract_document

    async def load(self, source: str) -> DocumentContent:
        """Return the parsed document for a path or URL.

        Failures are not cached, so a later call retries the fetch and parse.
        """
        source = resolve_source(source)

        cached = self.cache.get(source)
        if cached is not None:
            logger.debug("Cache hit for %s", source)
            return cached

        logger.debug("Loading %s", source)
        data = await self._fetch(source, self.config)
        content = await to_thread.run_sync(self._parse, data)

        self.cache.put(source, content)
        logger.debug(
            "Cached %s (%d pages, %d characters)",
            source, content.metadata.pages, len(content.text),
        )
        return content
