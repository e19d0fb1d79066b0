"""
SiteIndex: content indexing and vector-store synchronization
"""

__version__ = "0.1.0"
