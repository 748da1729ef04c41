"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from docwatch.api import auth, documents, health, workspaces

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(workspaces.router, prefix="/workspaces", tags=["workspaces"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])

# Older dashboard builds still call the document routes under /items
api_router.include_router(
    documents.router, prefix="/items", tags=["documents"], include_in_schema=False
)
