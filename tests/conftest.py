"""Shared fixtures for the PDF reader tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import fitz  # PyMuPDF
import pytest

from mcp_pdf_reader.config import ServerConfig
from mcp_pdf_reader.loader import DocumentCache, DocumentContent, DocumentLoader, DocumentMetadata


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_pdf_bytes(pages: List[str], metadata: Optional[Dict[str, str]] = None) -> bytes:
    """Build a real PDF with one text block per page."""
    doc = fitz.open()
    try:
        for text in pages:
            page = doc.new_page()
            page.insert_text((72, 72), text, fontsize=11)
        if metadata:
            doc.set_metadata(metadata)
        return doc.tobytes()
    finally:
        doc.close()


def make_content(line_count: int, pages: int, prefix: str = "line") -> DocumentContent:
    """DocumentContent with numbered lines ``line 1`` .. ``line N``."""
    text = "\n".join(f"{prefix} {i}" for i in range(1, line_count + 1))
    return DocumentContent(text=text, metadata=DocumentMetadata(pages=pages))


class CountingFetch:
    """Fake fetch coroutine recording every source it is asked for."""

    def __init__(self, data: bytes = b"%PDF-1.7 fake"):
        self.data = data
        self.calls: List[str] = []

    async def __call__(self, source: str, config: ServerConfig) -> bytes:
        self.calls.append(source)
        return self.data


class CountingParse:
    """Fake parser returning a fixed document and counting calls."""

    def __init__(self, content: DocumentContent):
        self.content = content
        self.calls = 0

    def __call__(self, data: bytes) -> DocumentContent:
        self.calls += 1
        return self.content


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(max_redirects=3, timeout=5.0)


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """A three page PDF on disk with title and author set."""
    data = make_pdf_bytes(
        [
            "Introduction\nThe quick brown fox",
            "Methods\nfoo bar baz",
            "Results\nFoo appears again",
        ],
        metadata={
            "title": "Sample Report",
            "author": "Jane Doe",
            "creationDate": "D:20240131120000+01'00'",
        },
    )
    path = tmp_path / "sample.pdf"
    path.write_bytes(data)
    return path


def build_loader(content: DocumentContent, config: Optional[ServerConfig] = None):
    """Loader wired to counting fakes; returns (loader, fetch, parse)."""
    fetch = CountingFetch()
    parse = CountingParse(content)
    loader = DocumentLoader(config or ServerConfig(), DocumentCache(), fetch=fetch, parse=parse)
    return loader, fetch, parse
