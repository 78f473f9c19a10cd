from __future__ import annotations

import logging
from mcp.server.fastmcp import FastMCP

from .settings import Settings
from .tools import register as register_tools
from .resources.format_info import register_format_resources

logger = logging.getLogger("mcp.rpg.server")

# Single FastMCP instance; __main__.py runs it over stdio or streamable HTTP.
mcp = FastMCP("rpg-structure")

register_tools(mcp)
register_format_resources(mcp)

# Eagerly load Settings once for visibility (format, indentation)
try:
    _ = Settings()
except Exception as e:
    logger.warning("Settings initialization warning: %s", e)
