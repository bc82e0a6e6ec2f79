import psycopg2
from psycopg2.extras import DictCursor, Json
from . import config as lambda_config # module import so reassigned globals are seen
from watermark_engine.logger import get_logger

logger = get_logger(__name__)

def get_db_connection():
    """Establishes and returns a new database connection using pre-fetched params."""
    if not lambda_config.db_connection_params:
        logger.error("DB connection parameters not loaded. Call initialize_config from config module first.")
        raise ConnectionError("Database parameters not initialized.")
    try:
        conn = psycopg2.connect(**lambda_config.db_connection_params)
        logger.info(f"Connected to database {lambda_config.db_connection_params['dbname']} on {lambda_config.db_connection_params['host']}.")
        return conn
    except psycopg2.Error as e:
        logger.error(f"Error connecting to PostgreSQL database: {e}", exc_info=True)
        raise

def as_json(value):
    """Wraps a dict for a jsonb parameter."""
    return Json(value)

def execute_query(conn, query, params=None, fetch_one=False, fetch_all=False, commit=False):
    """Executes a SQL query and returns results if any."""
    with conn.cursor(cursor_factory=DictCursor) as cur:
        cur.execute(query, params)
        if fetch_one:
            row = cur.fetchone()
            if commit:
                conn.commit()
            return row
        if fetch_all:
            return cur.fetchall()
        if commit:
            conn.commit()
            return cur.rowcount
        return None
