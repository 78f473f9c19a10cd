from __future__ import annotations
import logging
import os
import sys
from .logging import configure_root_logging
from .server import mcp

def main() -> None:
    """
    Run the RPG structure MCP server using the official SDK runner.

    Examples:
      # default: stdio (editors and MCP Inspector)
      python -m mcp_rpg_structure

      # streamable HTTP at 0.0.0.0:8766 mounted at /mcp
      MCP_TRANSPORT=streamable-http MCP_PORT=8766 python -m mcp_rpg_structure
    """
    configure_root_logging()
    log = logging.getLogger("mcp.rpg.main")

    if any(a in ("-h", "--help") for a in sys.argv[1:]):
        sys.stderr.write("mcp-rpg-structure: MCP server that generates and imports RPG dcl-ds structures.\n")
        sys.stderr.flush()
        return

    transport = os.getenv("MCP_TRANSPORT", "stdio").strip().lower()

    # Configure runner settings BEFORE run()
    host = os.getenv("MCP_HOST", "0.0.0.0")
    port = int(os.getenv("MCP_PORT", "8766"))
    mcp.settings.host = host
    mcp.settings.port = port

    if transport == "streamable-http":
        mcp.settings.streamable_http_path = os.getenv("MCP_MOUNT_PATH", "/mcp")
    elif transport == "sse":
        mcp.settings.sse_path = os.getenv("MCP_SSE_PATH", "/sse")

    log.info("server.start transport=%s host=%s port=%s", transport, host, port)
    mcp.run(transport=transport)

if __name__ == "__main__":
    main()
