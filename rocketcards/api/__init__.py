"""
API module - HTTP surface for the match engine.

Run with: uvicorn --factory rocketcards.api.app:create_app
"""

from .service import APIService, ProfileRequiredError
from .app import create_app

__all__ = [
    "APIService",
    "ProfileRequiredError",
    "create_app",
]
