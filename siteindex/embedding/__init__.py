"""
Embedding Client Abstraction
Text to fixed-length vector
"""

from siteindex.embedding.factory import build_embedding_client
from siteindex.embedding.protocol import EmbeddingClientProtocol

__all__ = ["EmbeddingClientProtocol", "build_embedding_client"]
