"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from travelmgr.api.routes import auth, users, expenses, itineraries, dashboard

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(expenses.router)
api_router.include_router(itineraries.router)
api_router.include_router(dashboard.router)
