"""API router factory functions."""
from .trigger import create_trigger_router
from .systems import create_systems_router

__all__ = [
    "create_trigger_router",
    "create_systems_router",
]
