"""
API Router
Combines all endpoint routers
"""
from fastapi import APIRouter
from leadstage.api.v1.endpoints import stage_transitions

api_router = APIRouter()

api_router.include_router(stage_transitions.router)
