"""
Export Cache Queries Module.

Parameterized asyncpg queries for the report_exports table, the only state
this service owns. The table is unique on (tenant_id, report_week_id):

    CREATE UNIQUE INDEX report_exports_tenant_report_week_idx
        ON report_exports (tenant_id, report_week_id);

so the upsert below converges to one row per fingerprint no matter how many
renders race for it.
"""


EXPORT_CACHE_LOOKUP_QUERY = """
    SELECT
        tenant_id::text AS tenant_id,
        report_week_id::text AS report_week_id,
        pdf_url,
        created_at
    FROM report_exports
    WHERE tenant_id = $1
      AND report_week_id = $2
    LIMIT 1
"""

# $1 tenant id, $2 report week id, $3 pdf path, $4 created_at
EXPORT_CACHE_UPSERT_QUERY = """
    INSERT INTO report_exports (tenant_id, report_week_id, pdf_url, created_at)
    VALUES ($1, $2, $3, $4)
    ON CONFLICT (tenant_id, report_week_id)
    DO UPDATE SET pdf_url = EXCLUDED.pdf_url,
                  created_at = EXCLUDED.created_at
    RETURNING tenant_id::text AS tenant_id,
              report_week_id::text AS report_week_id,
              pdf_url,
              created_at
"""


def get_export_records_query(by_tenant: bool = False) -> str:
    """
    Generate SQL listing export cache records, newest first.

    Args:
        by_tenant: When True, $1 is a tenant id filter and $2 the row limit;
            otherwise $1 is the row limit.

    Returns:
        Parameterized query string.
    """
    if by_tenant:
        return """
        SELECT
            tenant_id::text AS tenant_id,
            report_week_id::text AS report_week_id,
            pdf_url,
            created_at
        FROM report_exports
        WHERE tenant_id = $1
        ORDER BY created_at DESC
        LIMIT $2
        """
    return """
        SELECT
            tenant_id::text AS tenant_id,
            report_week_id::text AS report_week_id,
            pdf_url,
            created_at
        FROM report_exports
        ORDER BY created_at DESC
        LIMIT $1
    """


# Every referenced artifact path, used by the orphan sweep
EXPORT_REFERENCED_PATHS_QUERY = """
    SELECT pdf_url
    FROM report_exports
    WHERE pdf_url IS NOT NULL
"""
