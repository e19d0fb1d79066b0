"""
API Routers
FastAPI route handlers
"""

from siteindex.routers import indexing

__all__ = ["indexing"]
