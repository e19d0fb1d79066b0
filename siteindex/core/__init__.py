"""
Core module: Configuration, Database, Logging, Common Utilities
"""

from siteindex.core.config import settings

__all__ = ["settings"]
