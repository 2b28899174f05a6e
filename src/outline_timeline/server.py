"""
Outline timeline MCP server entry point.

Startup sequence:
1. Read OUTLINE_FILE and CREATE_IF_MISSING from environment
2. Initialize TimelineCache (parse + schedule, creating the file if asked)
3. Start cache background worker thread
4. Start OutlineWatcher daemon thread
5. Register all MCP tools
6. Start REST API server in background thread (if API_ENABLED)
7. Run MCP server (stdio transport)
"""

import logging
import os
import sys
import threading
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from outline_timeline.cache.timeline_cache import TimelineCache
from outline_timeline.tools import register_timeline_tools
from outline_timeline.watcher.outline_watcher import OutlineWatcher

log = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def _start_api_server(cache, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from outline_timeline.api.app import create_app

    app = create_app(cache)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    outline_env = os.environ.get("OUTLINE_FILE", "")
    if not outline_env:
        log.error("OUTLINE_FILE environment variable is not set")
        sys.exit(1)

    outline_file = Path(outline_env)
    create_if_missing = _env_flag("CREATE_IF_MISSING", "true")
    if not outline_file.exists() and not create_if_missing:
        log.error("OUTLINE_FILE does not exist: %s", outline_file)
        sys.exit(1)

    log.info("Outline file: %s", outline_file)

    cache = TimelineCache()
    cache.initialize(outline_file, create_if_missing=create_if_missing)

    # Start background worker that drains the update queue
    cache.start_worker()

    watcher = OutlineWatcher(cache, outline_file)
    watcher.start()

    if _env_flag("API_ENABLED", "true"):
        api_port = int(os.environ.get("API_PORT", "9410"))
        api_thread = threading.Thread(
            target=_start_api_server, args=(cache, api_port), daemon=True
        )
        api_thread.start()

    mcp = FastMCP("outline-timeline")
    register_timeline_tools(mcp, cache)

    log.info("Starting outline-timeline server")
    try:
        mcp.run(transport="stdio")
    finally:
        watcher.stop()
        cache.stop_worker()


if __name__ == "__main__":
    main()
