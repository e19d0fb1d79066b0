"""
Indexing pipeline services
"""
