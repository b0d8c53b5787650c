"""Tests for the MCP server wiring."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import mcp.types as types
import pytest

from conftest import build_loader, make_content
from mcp_pdf_reader.config import ServerConfig
from mcp_pdf_reader.loader import DocumentCache
from mcp_pdf_reader.server import SERVER_NAME, PDFReaderServer


class TestPDFReaderServer:
    """Test PDFReaderServer handlers."""

    def test_owns_its_cache(self) -> None:
        first = PDFReaderServer()
        second = PDFReaderServer()

        assert isinstance(first.cache, DocumentCache)
        assert first.cache is not second.cache
        assert first.loader.cache is first.cache
        assert first.server.name == SERVER_NAME

    def test_uses_given_config(self) -> None:
        config = ServerConfig(max_redirects=2)
        server = PDFReaderServer(config)

        assert server.loader.config is config

    @pytest.mark.anyio
    async def test_list_tools(self) -> None:
        tools = await PDFReaderServer().list_tools()

        assert {tool.name for tool in tools} == {
            "read_pdf",
            "read_pdf_page",
            "get_pdf_metadata",
            "search_pdf",
        }

    @pytest.mark.anyio
    async def test_unknown_tool_is_text_response(self) -> None:
        contents = await PDFReaderServer().call_tool("delete_pdf", {"path": "a.pdf"})

        assert len(contents) == 1
        assert isinstance(contents[0], types.TextContent)
        assert contents[0].text.startswith("Error: Unknown tool")

    @pytest.mark.anyio
    async def test_missing_file_is_text_response(self, tmp_path: Path) -> None:
        contents = await PDFReaderServer().call_tool(
            "read_pdf", {"path": str(tmp_path / "missing.pdf")}
        )

        assert contents[0].text.startswith("Error: ")
        assert "missing.pdf" in contents[0].text

    @pytest.mark.anyio
    async def test_injected_loader(self) -> None:
        loader, fetch, _ = build_loader(make_content(50, 5))
        server = PDFReaderServer(loader=loader)

        contents = await server.call_tool(
            "read_pdf_page", {"path": "https://example.com/a.pdf", "page": 2}
        )
        payload = json.loads(contents[0].text)

        assert payload["text"].startswith("line 11")
        assert fetch.calls == ["https://example.com/a.pdf"]

    @pytest.mark.anyio
    async def test_real_pdf_round_trip(self, sample_pdf: Path) -> None:
        server = PDFReaderServer()

        read = json.loads((await server.call_tool("read_pdf", {"path": str(sample_pdf)}))[0].text)
        meta = json.loads(
            (await server.call_tool("get_pdf_metadata", {"path": str(sample_pdf)}))[0].text
        )
        found = json.loads(
            (await server.call_tool("search_pdf", {"path": str(sample_pdf), "query": "foo"}))[0].text
        )

        assert read["source"] == str(sample_pdf)
        assert "The quick brown fox" in read["text"]
        assert meta["metadata"]["title"] == "Sample Report"
        assert meta["metadata"]["author"] == "Jane Doe"
        assert meta["metadata"]["pages"] == 3
        assert meta["metadata"]["created"].startswith("2024-01-31T12:00:00")
        assert found["totalMatches"] == 2
        assert [m["text"] for m in found["matches"]] == [
            "foo bar baz",
            "Foo appears again",
        ]
        assert len(server.cache) == 1

    @pytest.mark.anyio
    @pytest.mark.parametrize("level", ["INFO", "WARNING", "ERROR"])
    async def test_startup_notice_ignores_log_level(
        self,
        level: str,
        capsys: pytest.CaptureFixture[str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(level)
        streams = (MagicMock(), MagicMock())

        @asynccontextmanager
        async def fake_stdio():
            yield streams

        server = PDFReaderServer(ServerConfig(log_level=level))
        with patch("mcp_pdf_reader.server.stdio_server", fake_stdio), patch.object(
            server.server, "run", new_callable=AsyncMock
        ) as run:
            await server.run()

        captured = capsys.readouterr()
        assert "PDF Reader MCP Server running on stdio" in captured.err
        assert captured.out == ""
        run.assert_awaited_once()
        assert run.await_args.args[:2] == streams
