"""
Movies Catalog - Core Module
============================

Shared components for the catalog service.

Components:
- config: Application configuration management
- logging: Structured logging setup
- exceptions: Domain failure kinds
- slugs: Slug derivation
- database: Database engine and session management
- security: Bearer token verification

Usage:
    from movies.core import settings, get_logger
"""

from .config import settings
from .logging import get_logger, setup_logging
from .exceptions import CatalogError, ValidationFailure, NotFound, Conflict, StorageFailure
from .slugs import generate_slug

__all__ = [
    # Configuration
    "settings",

    # Logging
    "get_logger",
    "setup_logging",

    # Exceptions
    "CatalogError",
    "ValidationFailure",
    "NotFound",
    "Conflict",
    "StorageFailure",

    # Slugs
    "generate_slug",
]
