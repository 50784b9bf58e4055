import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import duckdb
import pandas as pd

from .config import (
    COMPANY_KEY_COLUMN,
    DEFAULT_DATA_DIR,
    DEFAULT_KEY_COLUMN,
    ENV_DATA_PATH,
    SECTION_TABLES,
)
from .normalize import is_blank

logger = logging.getLogger(__name__)

# Export formats the aggregator can mount, in lookup order.
_READERS = {
    ".parquet": "read_parquet",
    ".json": "read_json_auto",
    ".csv": "read_csv_auto",
}


def resolve_data_path(default_dir: Path = DEFAULT_DATA_DIR) -> str:
    """
    Resolve the export directory from env or the default ./data folder.
    Returns an empty string if nothing is found so callers can handle gracefully.
    """
    env_path = os.getenv(ENV_DATA_PATH, "").strip()
    if env_path:
        return env_path
    if default_dir.exists():
        return str(default_dir)
    return ""


def table_file(data_dir: Path, table: str) -> Optional[Path]:
    for suffix in _READERS:
        candidate = data_dir / f"{table}{suffix}"
        if candidate.exists():
            return candidate
    return None


def connect_duckdb(data_path: str) -> duckdb.DuckDBPyConnection:
    """
    Create an in-memory DuckDB connection and mount every table export found
    in ``data_path`` as a view named after the table.
    """
    if not data_path:
        raise FileNotFoundError(
            f"Data path is empty. Set {ENV_DATA_PATH} or place the table exports in ./data."
        )
    data_dir = Path(data_path)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found: {data_dir}")

    conn = duckdb.connect(database=":memory:")
    for table in SECTION_TABLES:
        path = table_file(data_dir, table)
        if path is None:
            logger.debug("No export for table %s in %s", table, data_dir)
            continue
        reader = _READERS[path.suffix]
        literal = str(path).replace("'", "''")
        try:
            conn.execute(f"CREATE OR REPLACE VIEW {table} AS SELECT * FROM {reader}('{literal}');")
        except duckdb.Error as exc:
            logger.warning("Could not mount %s from %s: %s", table, path, exc)
    return conn


def mounted_tables(conn: duckdb.DuckDBPyConnection) -> List[str]:
    rows = conn.execute("SELECT view_name FROM duckdb_views() WHERE NOT internal").fetchall()
    return [name for (name,) in rows]


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    clean = df.astype(object).where(pd.notna(df), None)
    return clean.to_dict(orient="records")


def fetch_company_tables(conn: duckdb.DuckDBPyConnection, company_id: Any) -> Dict[str, List[Dict[str, Any]]]:
    """
    Fetch every section table's rows for one company. ``company_info`` is
    matched on ``id``, every other table on ``company_info_id``. A table that
    is missing or fails to load yields an empty list.
    """
    if is_blank(company_id):
        raise ValueError("Missing company ID, cannot generate report.")

    available = set(mounted_tables(conn))
    result: Dict[str, List[Dict[str, Any]]] = {}
    for table in SECTION_TABLES:
        if table not in available:
            result[table] = []
            continue
        column = COMPANY_KEY_COLUMN.get(table, DEFAULT_KEY_COLUMN)
        try:
            df = conn.execute(
                f"SELECT * FROM {table} WHERE CAST({column} AS VARCHAR) = ?;", [str(company_id)]
            ).df()
            result[table] = _records(df)
        except duckdb.Error as exc:
            logger.warning("Error fetching %s for company %s: %s", table, company_id, exc)
            result[table] = []
    logger.info(
        "Fetched %d rows across %d tables for company %s",
        sum(len(rows) for rows in result.values()),
        len(result),
        company_id,
    )
    return result


def load_company_tables(company_id: Any, data_path: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
    conn = connect_duckdb(data_path if data_path is not None else resolve_data_path())
    try:
        return fetch_company_tables(conn, company_id)
    finally:
        conn.close()
