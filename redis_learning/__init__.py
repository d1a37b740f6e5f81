"""
Redis learning project.

Tutorial examples for the Redis client API plus a small cache-aside
accessor shared by the caching examples.
"""

__version__ = "1.0.0"
