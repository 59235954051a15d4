"""
Report Export Package.

FastAPI service that produces cached, tenant co-branded PDF snapshots of
published weekly reports.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Aggregation, branding, document rendering and export
    - jobs: Maintenance jobs for the export storage
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
