"""
Movies Catalog - Database Management
====================================

Async database connection management using SQLAlchemy 2.0+ with PostgreSQL
(asyncpg) in production and SQLite (aiosqlite) for tests and local runs.

Usage:
    from movies.core.database import init_database, get_session_factory

    await init_database()
    session_factory = get_session_factory()
"""

import time
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool, StaticPool

from movies.core.config import settings
from movies.core.logging import get_logger
from movies.models.database import Base

logger = get_logger(__name__)

# ==========================================
# DATABASE ENGINE
# ==========================================

# Global engine instance
engine: Optional[AsyncEngine] = None

# Global session factory
AsyncSessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


# ==========================================
# ENGINE CREATION AND CONFIGURATION
# ==========================================

def create_database_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create and configure the async database engine"""

    url = database_url or settings.DATABASE_URL

    parsed_url = urlparse(url)
    safe_url = f"{parsed_url.scheme}://**:**@{parsed_url.hostname}:{parsed_url.port}{parsed_url.path}"
    logger.info(f"Connecting to database: {safe_url}")

    engine_config: Dict[str, Any] = {
        "url": url,
        "echo": settings.DB_ECHO,
    }

    if url.startswith("sqlite"):
        # An in-memory database only lives as long as its one connection
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            engine_config["poolclass"] = StaticPool
        else:
            engine_config["poolclass"] = NullPool
        engine_config["connect_args"] = {"check_same_thread": False}
    elif settings.TESTING:
        engine_config["poolclass"] = NullPool
    else:
        engine_config.update({
            "pool_pre_ping": True,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "connect_args": {
                "server_settings": {
                    "application_name": f"{settings.APP_NAME}_v{settings.APP_VERSION}",
                },
                "command_timeout": 60,
            },
        })

    try:
        new_engine = create_async_engine(**engine_config)
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise

    setup_database_events(new_engine)
    logger.info("Database engine created successfully")
    return new_engine


# ==========================================
# SESSION MANAGEMENT
# ==========================================

def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if AsyncSessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return AsyncSessionLocal


# ==========================================
# DATABASE INITIALIZATION
# ==========================================

async def init_database(create_tables: bool = False) -> None:
    """Initialize database engine and session factory"""
    global engine, AsyncSessionLocal

    logger.info("Initializing database...")

    try:
        engine = create_database_engine()
        AsyncSessionLocal = create_session_factory(engine)

        await test_database_connection()

        if create_tables:
            await DatabaseManager(engine).create_tables()

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_database() -> None:
    """Close database connections"""
    global engine, AsyncSessionLocal

    logger.info("Closing database connections...")

    if engine:
        await engine.dispose()
        logger.info("Async database engine disposed")

    engine = None
    AsyncSessionLocal = None


# ==========================================
# DATABASE HEALTH
# ==========================================

async def test_database_connection() -> bool:
    """Test database connection"""
    if not engine:
        raise RuntimeError("Database engine not initialized")

    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            row = result.fetchone()
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        raise

    if row and row[0] == 1:
        logger.info("Database connection test successful")
        return True

    logger.error("Database connection test failed: unexpected result")
    return False


async def check_database_health(target: Optional[AsyncEngine] = None) -> Dict[str, Any]:
    """Database health check for the health endpoint"""
    target = target or engine
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "checks": {},
    }

    if not target:
        health_status["status"] = "unhealthy"
        health_status["error"] = "Database engine not initialized"
        return health_status

    started = time.perf_counter()
    try:
        async with target.connect() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["checks"]["connectivity"] = "pass"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["connectivity"] = f"fail: {e}"

    health_status["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return health_status


class DatabaseManager:
    """Schema provisioning for development and tests (no migrations)"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def create_tables(self):
        """Create all tables defined in models"""
        logger.info("Creating database tables...")
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            raise

    async def drop_tables(self):
        """Drop all tables (WARNING: This will delete all data!)"""
        logger.warning("Dropping all database tables...")
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("Database tables dropped successfully")
        except Exception as e:
            logger.error(f"Failed to drop database tables: {e}")
            raise


# ==========================================
# EVENT LISTENERS
# ==========================================

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores REFERENCES clauses unless asked per connection"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def setup_database_events(target: AsyncEngine) -> None:
    """Setup database event listeners for connection settings and slow queries"""

    sync_engine = target.sync_engine

    if sync_engine.dialect.name == "sqlite":
        event.listen(sync_engine, "connect", _enable_sqlite_foreign_keys)

    @event.listens_for(sync_engine, "before_cursor_execute")
    def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._query_start_time = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = getattr(context, "_query_start_time", None)
        if started is None:
            return
        total = time.perf_counter() - started
        if total > 1.0:  # Log queries taking more than 1 second
            logger.warning(f"Slow query ({total:.3f}s): {statement[:100]}...")


__all__ = [
    "engine",
    "AsyncSessionLocal",
    "create_database_engine",
    "create_session_factory",
    "get_session_factory",
    "init_database",
    "close_database",
    "test_database_connection",
    "check_database_health",
    "DatabaseManager",
    "setup_database_events",
]
