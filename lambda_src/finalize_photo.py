"""
Photo finalization workflow.
Bakes the watermark into a stored photo once its bytes are finalized, out
of band from the upload request.
"""
from botocore.exceptions import ClientError

from . import config as lambda_config
from watermark_engine.logger import get_logger
from watermark_engine.processor import apply_server_watermark

logger = get_logger(__name__)

def _read_object(s3_client, bucket, key):
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
    except ClientError as e:
        logger.error(f"Failed to read s3://{bucket}/{key}: {e}", exc_info=True)
        raise
    return response['Body'].read(), response.get('ContentType')

def handle_watermark_workflow(message_data, settings_cache=None, s3_client=None):
    """
    Handles the 'watermark' message type.

    Expects `key` and optionally `bucket` (defaults to S3_PHOTO_BUCKET) and
    `output_key` (defaults to overwriting `key`). Returns a summary dict.
    """
    bucket = message_data.get('bucket') or lambda_config.S3_PHOTO_BUCKET
    key = message_data.get('key')
    if not bucket or not key:
        logger.error("'watermark' message missing data (bucket or key).")
        raise ValueError("Incomplete data for 'watermark' message type.")
    output_key = message_data.get('output_key') or key

    s3_client = s3_client or lambda_config.get_s3_client()
    settings_cache = settings_cache or lambda_config.get_settings_cache()

    original, content_type = _read_object(s3_client, bucket, key)
    settings = settings_cache.get()
    result = apply_server_watermark(original, settings)

    watermarked = result is not original
    if not watermarked and output_key == key:
        logger.info(f"No watermark applied to s3://{bucket}/{key}; object left as is.")
        return {'bucket': bucket, 'key': output_key, 'watermarked': False}

    put_kwargs = {'Bucket': bucket, 'Key': output_key, 'Body': result}
    if content_type:
        put_kwargs['ContentType'] = content_type
    s3_client.put_object(**put_kwargs)
    logger.info(f"Wrote photo to s3://{bucket}/{output_key} ({len(result)} bytes, watermarked={watermarked}).")
    return {'bucket': bucket, 'key': output_key, 'watermarked': watermarked}
