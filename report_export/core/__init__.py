"""
Core infrastructure package for the report export service.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL database connectivity via asyncpg

This module re-exports key components from submodules for convenient
importing:

    from report_export.core import get_settings, get_db_pool

FastAPI dependencies live in report_export.core.dependencies. They depend on
the service layer, so they are imported from there directly rather than
re-exported here.

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    init_db: Async function to initialize the database connection pool
    close_db: Async function to close the database connection pool
    get_db_pool: Async function to get the database connection pool

Usage Examples:
    from report_export.core import init_db, close_db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        yield
        await close_db()
"""

# =============================================================================
# Re-exports from report_export.core.config
# =============================================================================
from report_export.core.config import Settings, get_settings

# =============================================================================
# Re-exports from report_export.core.database
# =============================================================================
from report_export.core.database import init_db, close_db, get_db_pool

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
]
