"""Tool catalogue and dispatch.

Each tool has a pydantic argument model (also used as the advertised input
schema) and a pydantic result model. ``ToolDispatcher.dispatch`` never raises:
every failure is captured in the returned ``ToolResult`` and only turned into
text by ``ToolResult.to_text`` at the protocol boundary.
"""

import json
import logging
from typing import Annotated, Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type, Union

import mcp.types as types
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    WithJsonSchema,
)
from pydantic.alias_generators import to_camel

from .errors import InvalidArgumentError, UnknownToolError
from .fetcher import resolve_source
from .loader import DocumentLoader, DocumentMetadata
from .pages import extract_pages
from .search import SearchMatch, search_text

logger = logging.getLogger(__name__)

PATH_DESCRIPTION = "Absolute or relative path to the PDF file, or a URL (http:// or https://)"


# Tool arguments

def _whole_number(value: Union[int, float]) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("must be a whole number")
    return int(value)


# JSON numbers such as 2.0 are accepted; strings, booleans and fractions are not
PageNumber = Annotated[
    Union[StrictInt, StrictFloat],
    AfterValidator(_whole_number),
    WithJsonSchema({"type": "number"}),
]


class PathArguments(BaseModel):
    """Arguments shared by every tool."""

    model_config = ConfigDict(populate_by_name=True)

    path: Annotated[StrictStr, Field(description=PATH_DESCRIPTION)]


class ReadPdfArguments(PathArguments):
    pass


class ReadPdfPageArguments(PathArguments):
    page: Annotated[
        Optional[PageNumber],
        Field(default=None, description="Page number to read (1-indexed)"),
    ]
    start_page: Annotated[
        Optional[PageNumber],
        Field(default=None, alias="startPage", description="Start page for range (1-indexed)"),
    ]
    end_page: Annotated[
        Optional[PageNumber],
        Field(default=None, alias="endPage", description="End page for range (1-indexed)"),
    ]


class GetPdfMetadataArguments(PathArguments):
    pass


class SearchPdfArguments(PathArguments):
    query: Annotated[StrictStr, Field(description="Text to search for")]
    case_sensitive: Annotated[
        StrictBool,
        Field(
            default=False,
            alias="caseSensitive",
            description="Whether search should be case-sensitive",
        ),
    ]


# Tool results

class ToolPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadPdfResult(ToolPayload):
    source: str
    text: str
    metadata: DocumentMetadata


class PageRange(ToolPayload):
    start_page: int
    end_page: int


class ReadPdfPageResult(ToolPayload):
    path: str
    requested_page: Optional[int] = None
    requested_range: Optional[PageRange] = None
    text: str
    total_pages: int


class GetPdfMetadataResult(ToolPayload):
    path: str
    metadata: DocumentMetadata


class SearchPdfResult(ToolPayload):
    path: str
    query: str
    matches: List[SearchMatch]
    total_matches: int


class ToolError(BaseModel):
    kind: str
    message: str


class ToolResult(BaseModel):
    """Outcome of one tool call: either a payload or an error."""

    tool: str
    payload: Optional[Dict[str, Any]] = None
    error: Optional[ToolError] = None

    @classmethod
    def success(cls, tool: str, result: ToolPayload) -> "ToolResult":
        payload = result.model_dump(mode="json", by_alias=True, exclude_none=True)
        return cls(tool=tool, payload=payload)

    @classmethod
    def failure(cls, tool: str, exc: Exception) -> "ToolResult":
        # Some exceptions, e.g. TimeoutError, carry no message
        message = str(exc) or type(exc).__name__
        return cls(tool=tool, error=ToolError(kind=type(exc).__name__, message=message))

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_text(self) -> str:
        """Render as the text payload returned to the host."""
        if self.error is not None:
            return f"Error: {self.error.message}"
        return json.dumps(self.payload, indent=2, ensure_ascii=False)


TOOLS = [
    types.Tool(
        name="read_pdf",
        description=(
            "Read and extract text content from a PDF file. "
            "Returns the full text content and metadata."
        ),
        inputSchema=ReadPdfArguments.model_json_schema(),
    ),
    types.Tool(
        name="read_pdf_page",
        description=(
            "Read a specific page or range of pages from a PDF file. "
            "Page boundaries are estimated by dividing the extracted lines evenly "
            "across the page count, so text near a page break is approximate."
        ),
        inputSchema=ReadPdfPageArguments.model_json_schema(),
    ),
    types.Tool(
        name="get_pdf_metadata",
        description="Get metadata information from a PDF file without reading all content.",
        inputSchema=GetPdfMetadataArguments.model_json_schema(),
    ),
    types.Tool(
        name="search_pdf",
        description="Search for specific text within a PDF file.",
        inputSchema=SearchPdfArguments.model_json_schema(),
    ),
]


def format_validation_error(tool: str, error: ValidationError) -> str:
    """Condense a pydantic ValidationError into one line."""
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{location}: {detail['msg']}")
    return f"Invalid arguments for {tool}: " + "; ".join(problems)


class ToolDispatcher:
    """Validate tool arguments and route calls to the document operations."""

    def __init__(self, loader: DocumentLoader):
        self.loader = loader
        self._handlers: Dict[str, Tuple[Type[PathArguments], Callable[[Any], Awaitable[ToolPayload]]]] = {
            "read_pdf": (ReadPdfArguments, self.read_pdf),
            "read_pdf_page": (ReadPdfPageArguments, self.read_pdf_page),
            "get_pdf_metadata": (GetPdfMetadataArguments, self.get_pdf_metadata),
            "search_pdf": (SearchPdfArguments, self.search_pdf),
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._handlers)

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
        """Run a tool and capture its outcome."""
        logger.debug("Tool call: %s with arguments: %s", name, arguments)
        try:
            result = await self._call(name, arguments)
        except Exception as e:
            logger.warning("Tool %s failed: %s: %s", name, type(e).__name__, e)
            return ToolResult.failure(name, e)
        return ToolResult.success(name, result)

    async def _call(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolPayload:
        if name not in self._handlers:
            raise UnknownToolError(f"Unknown tool: {name}")
        if arguments is None:
            raise InvalidArgumentError("Missing arguments for tool call")

        model, handler = self._handlers[name]
        try:
            args = model.model_validate(arguments)
        except ValidationError as e:
            raise InvalidArgumentError(format_validation_error(name, e)) from e

        return await handler(args)

    async def read_pdf(self, args: ReadPdfArguments) -> ReadPdfResult:
        source = resolve_source(args.path)
        content = await self.loader.load(source)
        return ReadPdfResult(source=source, text=content.text, metadata=content.metadata)

    async def read_pdf_page(self, args: ReadPdfPageArguments) -> ReadPdfPageResult:
        source = resolve_source(args.path)
        content = await self.loader.load(source)
        text = extract_pages(
            content,
            page=args.page,
            start_page=args.start_page,
            end_page=args.end_page,
        )

        requested_range = None
        if args.start_page is not None and args.end_page is not None:
            requested_range = PageRange(start_page=args.start_page, end_page=args.end_page)

        return ReadPdfPageResult(
            path=source,
            requested_page=args.page,
            requested_range=requested_range,
            text=text,
            total_pages=content.metadata.pages,
        )

    async def get_pdf_metadata(self, args: GetPdfMetadataArguments) -> GetPdfMetadataResult:
        source = resolve_source(args.path)
        content = await self.loader.load(source)
        return GetPdfMetadataResult(path=source, metadata=content.metadata)

    async def search_pdf(self, args: SearchPdfArguments) -> SearchPdfResult:
        source = resolve_source(args.path)
        content = await self.loader.load(source)
        matches = search_text(content.text, args.query, case_sensitive=args.case_sensitive)
        return SearchPdfResult(
            path=source,
            query=args.query,
            matches=matches,
            total_matches=len(matches),
        )
