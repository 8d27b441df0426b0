"""Safe Supabase query helpers."""
import logging
from typing import Any, Dict, List, Optional

from minhavez.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def run_query(query, table_name: str, operation: str = "select"):
    """Execute a prepared query builder, wrapping client failures in DatabaseError."""
    try:
        return query.execute()
    except Exception as e:
        logger.error(f"Database error on {operation} {table_name}: {e}")
        raise DatabaseError(f"Database operation failed on {table_name}") from e


def safe_supabase_select(
    supabase,
    table_name: str,
    select_fields: str = "*",
    filters: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Select rows matching equality filters. Returns an empty list when nothing matches."""
    query = supabase.table(table_name).select(select_fields)
    for field, value in (filters or {}).items():
        query = query.eq(field, value)
    response = run_query(query, table_name)
    return response.data or []


def safe_supabase_select_one(
    supabase,
    table_name: str,
    select_fields: str = "*",
    filters: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """Select a single row or None."""
    query = supabase.table(table_name).select(select_fields)
    for field, value in (filters or {}).items():
        query = query.eq(field, value)
    response = run_query(query.limit(1), table_name)
    return response.data[0] if response.data else None


def safe_supabase_count(supabase, table_name: str, query_builder=None) -> int:
    """Count-only query. `query_builder` receives the select and adds filters."""
    query = supabase.table(table_name).select("id", count="exact", head=True)
    if query_builder:
        query = query_builder(query)
    response = run_query(query, table_name, "count")
    return response.count or 0


def safe_supabase_insert(supabase, table_name: str, data: dict) -> Dict[str, Any]:
    """Insert a row and return it."""
    response = run_query(supabase.table(table_name).insert(data), table_name, "insert")
    if not response.data:
        raise DatabaseError(f"Failed to create {table_name}")
    return response.data[0]


def safe_supabase_update(
    supabase, table_name: str, data: dict, filters: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    """Update rows matching all filters; returns the first updated row or None if nothing matched."""
    query = supabase.table(table_name).update(data)
    for field, value in filters.items():
        query = query.eq(field, value)
    response = run_query(query, table_name, "update")
    return response.data[0] if response.data else None
