"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from brightminds.api.v1.endpoints import users, classrooms, games, attempts

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(classrooms.router, prefix="/classrooms", tags=["Classrooms"])
api_router.include_router(games.router, prefix="/games", tags=["Game Library"])
api_router.include_router(attempts.router, prefix="/game-attempts", tags=["Game Attempts"])
