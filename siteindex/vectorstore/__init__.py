"""
VectorStore Abstraction
Namespaced vector storage and tenant cleanup
"""

from siteindex.vectorstore.cleanup import IndexCleaner
from siteindex.vectorstore.factory import build_index_cleaner, build_vectorstore
from siteindex.vectorstore.protocol import VectorStoreProtocol
from siteindex.vectorstore.schemas import VectorRecord

__all__ = [
    "IndexCleaner",
    "VectorRecord",
    "VectorStoreProtocol",
    "build_index_cleaner",
    "build_vectorstore",
]
