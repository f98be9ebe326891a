"""Web API for the wellness journal."""

from typing import Optional

import uvicorn

from ..utils.config import get_settings


def run(host: Optional[str] = None, port: Optional[int] = None):
    """Run the web server."""
    settings = get_settings()
    uvicorn.run(
        "wellness_journal.web.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.reload,
    )


__all__ = ["run"]
