import os
import boto3
from watermark_engine.config import CONFIG
from watermark_engine.logger import get_logger

logger = get_logger(__name__) # Logger for this config module

# --- Environment Variables ---
# For Database
DB_HOST = os.environ.get('DB_HOST')
DB_PORT = os.environ.get('DB_PORT', '5432') # Default PostgreSQL port
DB_NAME = os.environ.get('DB_NAME')
DB_USER = os.environ.get('DB_USER')
DB_PASSWORD = os.environ.get('DB_PASSWORD')

# Bucket holding finalized photos (messages may name another bucket explicitly)
S3_PHOTO_BUCKET = os.environ.get('S3_PHOTO_BUCKET')

# Settings cache window, seconds
WATERMARK_SETTINGS_TTL = float(os.environ.get('WATERMARK_SETTINGS_TTL', CONFIG['cache']['server_ttl_seconds']))

# --- Global Variables / Initializers ---
db_connection_params = None
_s3_client = None
_settings_cache_singleton = None # Internal, use getter

def _load_db_credentials_from_env():
    """Loads DB credentials directly from environment variables."""
    global db_connection_params
    logger.info("Attempting to load DB credentials from environment variables...")
    logger.info(f"Read DB_HOST: '{DB_HOST}', DB_PORT: '{DB_PORT}', DB_NAME: '{DB_NAME}', DB_USER: '{DB_USER}'")
    logger.info(f"DB_PASSWORD is {'SET' if DB_PASSWORD else 'NOT SET'}")

    required_db_vars = {
        'DB_HOST': DB_HOST,
        'DB_NAME': DB_NAME,
        'DB_USER': DB_USER,
        'DB_PASSWORD': DB_PASSWORD
    }
    missing_vars = [key for key, value in required_db_vars.items() if not value]
    if missing_vars:
        db_connection_params = None
        err_msg = f"Missing required database environment variables: {', '.join(missing_vars)}"
        logger.error(err_msg)
        raise ValueError(f"Incomplete database configuration. Missing: {', '.join(missing_vars)}")

    try:
        port = int(DB_PORT)
    except ValueError as e:
        db_connection_params = None
        logger.error(f"Invalid DB_PORT value: '{DB_PORT}'. Must be an integer. Error: {e}", exc_info=True)
        raise ValueError(f"Invalid DB_PORT: {e}")

    db_connection_params = {
        "host": DB_HOST,
        "port": port,
        "dbname": DB_NAME,
        "user": DB_USER,
        "password": DB_PASSWORD
    }
    safe_params_to_log = {k: (v if k != 'password' else '********') for k, v in db_connection_params.items()}
    logger.info(f"Database credentials loaded. db_connection_params (password masked): {safe_params_to_log}")

def initialize_config():
    """Initializes configurations that can be done once per cold start, like DB creds."""
    logger.info("Initializing Lambda configuration...")
    if not db_connection_params:
        _load_db_credentials_from_env()
    else:
        logger.info("db_connection_params already set. Skipping load.")
    logger.info("Lambda configuration initialization finished.")

def get_s3_client():
    """Returns the shared S3 client, created on first use."""
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client('s3')
    return _s3_client

def get_settings_cache():
    """Returns the process-wide TTL cache of the watermark settings row."""
    global _settings_cache_singleton
    if _settings_cache_singleton is None:
        from watermark_engine.settings_cache import TTLSettingsCache
        from .db_utils import get_db_connection
        from .settings_store import fetch_persisted_settings

        def fetch_from_db():
            conn = get_db_connection()
            try:
                return fetch_persisted_settings(conn)
            finally:
                conn.close()

        logger.info(f"Initializing watermark settings cache (ttl {WATERMARK_SETTINGS_TTL}s).")
        _settings_cache_singleton = TTLSettingsCache(fetch_from_db, ttl_seconds=WATERMARK_SETTINGS_TTL)
    return _settings_cache_singleton
