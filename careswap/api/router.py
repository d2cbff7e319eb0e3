"""
api router

this file is basically the "table of contents" for all endpoints.

- main.py stays clean (just creates the app and includes this router)
- routes are grouped by feature (health, swap, state, demo)
"""

from fastapi import APIRouter

from careswap.api.routes.demo import router as demo_router
from careswap.api.routes.health import router as health_router
from careswap.api.routes.state import router as state_router
from careswap.api.routes.swap import router as swap_router

api_router = APIRouter()

# health checks and sanity endpoints
api_router.include_router(health_router, tags=["health"])

# stateless swap suggestions (the main feature)
api_router.include_router(swap_router, tags=["swap"])

# roster loaded once, swap requests submitted and reviewed against it
api_router.include_router(state_router, tags=["state"])

# demo endpoints exist to make the project easy to try in swagger
api_router.include_router(demo_router, tags=["demo"])
