"""
api router

this file is basically the "table of contents" for all endpoints.

why we do this:
- main.py stays clean (just creates the app and includes this router)
- routes are grouped by feature (catalog, composer, timeline, batch, etc.)
- scaling is easier when more people contribute
"""

from fastapi import APIRouter

from carelane.api.routes.batch import router as batch_router
from carelane.api.routes.catalog import router as catalog_router
from carelane.api.routes.composer import router as composer_router
from carelane.api.routes.demo import router as demo_router
from carelane.api.routes.health import router as health_router
from carelane.api.routes.sessions import router as sessions_router
from carelane.api.routes.state import router as state_router
from carelane.api.routes.timeline import router as timeline_router

api_router = APIRouter()

# health checks and sanity endpoints
api_router.include_router(health_router, tags=["health"])

# static catalog: intents, service codes, places of service
api_router.include_router(catalog_router, tags=["catalog"])

# roster, authorizations, reset
api_router.include_router(state_router, tags=["state"])

# the schedule itself + drag/drop
api_router.include_router(sessions_router, tags=["sessions"])
api_router.include_router(timeline_router, tags=["timeline"])

# the appointment wizard (the main feature)
api_router.include_router(composer_router, tags=["composer"])

# cancel / move / reassign many sessions at once
api_router.include_router(batch_router, tags=["batch"])

# demo endpoints exist to make the project easy to try in swagger
api_router.include_router(demo_router, tags=["demo"])
