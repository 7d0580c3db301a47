"""
Work Item Interfaces Layer
==========================

FastAPI route handlers for work items and event ingestion.
"""

from devops_guard.workitems.interfaces.controllers import router as workitems_router

__all__ = ["workitems_router"]
