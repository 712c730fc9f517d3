"""
app entry point

run locally:
    uvicorn carelane.main:app --reload
or:
    python -m carelane.main

then open /docs, call POST /demo/load, and try GET /timeline.
"""

from fastapi import FastAPI

from carelane.api.router import api_router
from carelane.core.config import settings
from carelane.core.logconfig import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title=f"{settings.app_name} API",
        version="0.1.0",
        description="Scheduling core for an ABA therapy practice.",
    )
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("carelane.main:app", host="0.0.0.0", port=8000, reload=settings.environment == "dev")
