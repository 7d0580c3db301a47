"""
Metrics Interfaces Layer
========================

FastAPI route handlers for metrics.
"""

from devops_guard.metrics.interfaces.controllers import router as metrics_router

__all__ = ["metrics_router"]
