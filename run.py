"""Run the page narrator FastAPI application with uvicorn."""

import uvicorn

from page_narrator.application.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "page_narrator.application.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
