"""
PDF Reader MCP Server

Exposes PDF reading tools to an MCP host over stdio:

1. read_pdf - full text and metadata
2. read_pdf_page - approximate page or page range
3. get_pdf_metadata - title, author, page count, creation date
4. search_pdf - line search with surrounding context

Documents may be local paths or http(s) URLs and are cached in memory for the
lifetime of the server.
"""

import sys
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .config import ServerConfig
from .loader import DocumentCache, DocumentLoader
from .tools import TOOLS, ToolDispatcher
from .version import __version__

SERVER_NAME = "pdf-reader-server"


class PDFReaderServer:
    """MCP server owning the document cache and the tool dispatcher."""

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        cache: Optional[DocumentCache] = None,
        loader: Optional[DocumentLoader] = None,
    ):
        self.config = config or ServerConfig()
        self.cache = cache if cache is not None else DocumentCache()
        self.loader = loader or DocumentLoader(self.config, self.cache)
        self.dispatcher = ToolDispatcher(self.loader)

        self.server = Server(SERVER_NAME, version=__version__)
        self.server.list_tools()(self.list_tools)
        # Arguments are validated by the dispatcher so shape errors come back as text
        self.server.call_tool(validate_input=False)(self.call_tool)

    async def list_tools(self) -> List[types.Tool]:
        """List available PDF tools."""
        return list(TOOLS)

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        """Handle a tool call, always answering with a single text item."""
        result = await self.dispatcher.dispatch(name, arguments)
        return [types.TextContent(type="text", text=result.to_text())]

    async def run(self) -> None:
        """Serve requests over stdin/stdout until the host disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            print("PDF Reader MCP Server running on stdio", file=sys.stderr)
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )
