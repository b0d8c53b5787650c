"""Startup configuration for the PDF reader server."""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from .version import __version__

# Configuration constants
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_TIMEOUT = 30.0  # Seconds, total per HTTP request
DEFAULT_USER_AGENT = f"MCP PDF Reader/{__version__} (Model Context Protocol)"
DEFAULT_LOG_LEVEL = "INFO"


class ServerConfig(BaseModel):
    """Settings fixed at process startup."""

    model_config = ConfigDict(frozen=True)

    max_redirects: Annotated[
        int,
        Field(
            default=DEFAULT_MAX_REDIRECTS,
            description="Maximum number of HTTP redirects followed per download.",
            gt=0,
        ),
    ]
    timeout: Annotated[
        float,
        Field(
            default=DEFAULT_TIMEOUT,
            description="Total timeout in seconds for each HTTP request.",
            gt=0,
        ),
    ]
    user_agent: Annotated[
        str,
        Field(
            default=DEFAULT_USER_AGENT,
            description="User-Agent header sent when downloading documents.",
        ),
    ]
    proxy_url: Annotated[
        Optional[str],
        Field(
            default=None,
            description="Proxy URL to use for HTTP downloads.",
        ),
    ]
    log_level: Annotated[
        str,
        Field(
            default=DEFAULT_LOG_LEVEL,
            description="Logging level name for the stderr log.",
        ),
    ]
