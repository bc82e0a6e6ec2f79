import json

from .db_utils import as_json, execute_query
from watermark_engine.errors import ConfigurationError
from watermark_engine.logger import get_logger
from watermark_engine.settings import WatermarkSettings, validate_settings_update

logger = get_logger(__name__)

SETTINGS_KEY = "watermark"

SELECT_SETTINGS_QUERY = "SELECT value FROM site_settings WHERE key = %s"
UPSERT_SETTINGS_QUERY = """
INSERT INTO site_settings (key, value)
VALUES (%s, %s)
ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
RETURNING key;
"""

def fetch_persisted_settings(db_conn):
    """Returns the raw persisted watermark record, or None when the row does not exist yet."""
    row = execute_query(db_conn, SELECT_SETTINGS_QUERY, (SETTINGS_KEY,), fetch_one=True)
    if not row or row['value'] is None:
        return None
    value = row['value']
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            logger.error(f"site_settings.value for '{SETTINGS_KEY}' is not valid JSON: {e}", exc_info=True)
            raise ValueError(f"Invalid JSON in site_settings.value: {e}")
    if not isinstance(value, dict):
        raise ValueError(f"site_settings.value for '{SETTINGS_KEY}' must be an object, got {type(value).__name__}")
    return value

def get_watermark_settings(db_conn):
    """GET semantics: the persisted record merged over the defaults."""
    return WatermarkSettings.from_dict(fetch_persisted_settings(db_conn))

def update_watermark_settings(db_conn, partial, cache=None):
    """
    PUT semantics: validate the partial record, merge it over the current
    settings, persist, then invalidate the server settings cache.

    Raises ConfigurationError before touching the database if a field is invalid.
    """
    validate_settings_update(partial)

    try:
        current = get_watermark_settings(db_conn)
        new_settings = current.merged(partial)
        execute_query(
            db_conn,
            UPSERT_SETTINGS_QUERY,
            (SETTINGS_KEY, as_json(new_settings.to_dict())),
            fetch_one=True,
            commit=True,
        )
    except Exception as e:
        logger.error(f"Failed to update watermark settings: {e}", exc_info=True)
        db_conn.rollback()
        raise

    if cache is not None:
        cache.invalidate()
    logger.info(f"Watermark settings updated: {new_settings.to_dict()}")
    return new_settings

def handle_update_settings_workflow(message_data, db_conn, cache=None):
    """Handles the 'update_settings' message type. Returns the persisted record as a dict."""
    settings_update = message_data.get('settings')
    if not isinstance(settings_update, dict):
        logger.error("'update_settings' message missing 'settings' object.")
        raise ConfigurationError("Settings update must be an object")

    if cache is None:
        from .config import get_settings_cache
        cache = get_settings_cache()

    return update_watermark_settings(db_conn, settings_update, cache).to_dict()
