"""HTTP routers."""

from .recurring import router as recurring_router

__all__ = ["recurring_router"]
