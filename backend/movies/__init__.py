"""
Movies Catalog - movies, genres and per-user ratings behind a FastAPI service
"""

__version__ = "1.0.0"
