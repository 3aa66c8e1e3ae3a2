"""
路由包初始化
"""

from foliosight.api.routes.health import router as health_router
from foliosight.api.routes.portfolio import router as portfolio_router

__all__ = [
    "health_router",
    "portfolio_router",
]
