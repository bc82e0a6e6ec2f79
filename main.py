import json
from watermark_engine.logger import get_logger

from lambda_src.config import initialize_config
from lambda_src.db_utils import get_db_connection
from lambda_src.finalize_photo import handle_watermark_workflow
from lambda_src.settings_store import handle_update_settings_workflow

logger = get_logger(__name__) # Logger for main.py specific messages

# --- SQS Message Processing Logic ---

def _route_message_type(message_type, message_data, db_conn):
    """Routes message to the appropriate handler based on type. Returns the handler's summary, if any."""
    if message_type == 'watermark':
        return handle_watermark_workflow(message_data)
    elif message_type == 'update_settings':
        return handle_update_settings_workflow(message_data, db_conn)
    else:
        logger.warning(f"Unknown SQS message type: '{message_type}'. Skipping.")
        return None

def _process_sqs_record(record, db_conn_shared):
    """Processes a single SQS record. Returns the routed handler's result."""
    logger.info(f"Processing SQS record with MessageId: {record.get('messageId')}")
    try:
        message_body_str = record.get('body')
        if not message_body_str:
            logger.warning("SQS record missing 'body'. Skipping.")
            return None

        message = json.loads(message_body_str)
        message_type = message.get('type')
        message_data = message.get('data', {})

        if isinstance(message_data, str):
            try:
                logger.info("message_data was a string, attempting to parse as JSON.")
                message_data = json.loads(message_data)
            except json.JSONDecodeError as json_err:
                logger.error(f"Failed to parse message_data string as JSON: {json_err}. Original string: {message_data}", exc_info=True)
                raise ValueError(f"message_data could not be parsed into a dictionary: {json_err}")

        logger.info(f"SQS Message Type: {message_type}")
        return _route_message_type(message_type, message_data, db_conn_shared)

    except Exception as e:
        logger.error(f"Failed to process SQS message ID {record.get('messageId', 'N/A')}: {e}", exc_info=True)
        raise # lambda_handler rolls back and lets SQS redrive the batch

# --- Main Lambda Handler ---
def lambda_handler(event, context):
    records = event.get('Records', [])
    logger.info(f"Received SQS event with {len(records)} records.")

    try:
        initialize_config()
    except Exception as e:
        logger.critical(f"Lambda initialization failed (e.g., DB credentials): {e}. Cannot process event.", exc_info=True)
        return {'statusCode': 500, 'body': f'Lambda configuration error: {e}'}

    results = []
    db_conn_batch = None

    try:
        db_conn_batch = get_db_connection() # One connection for the whole batch

        for record in records:
            result = _process_sqs_record(record, db_conn_batch)
            if result is not None:
                results.append({'messageId': record.get('messageId'), 'result': result})

        db_conn_batch.commit()
        logger.info(f"Batch processing successful, {len(results)} records produced results.")
        return {
            'statusCode': 200,
            'body': json.dumps({'message': 'SQS event processed successfully.', 'results': results})
        }

    except Exception as batch_level_exception:
        logger.error(f"Error at batch level in lambda_handler: {batch_level_exception}", exc_info=True)
        if db_conn_batch:
            try:
                db_conn_batch.rollback()
                logger.info("Database transaction rolled back due to batch-level error.")
            except Exception as rb_err:
                logger.error(f"Failed to rollback DB transaction at batch level: {rb_err}", exc_info=True)
        raise # Re-raise for SQS to handle (DLQ, retry)
    finally:
        if db_conn_batch:
            db_conn_batch.close()
            logger.info("Database connection closed at end of lambda_handler.")

# Local testing placeholder
if __name__ == "__main__":
    # Set DB_HOST, DB_NAME, DB_USER, DB_PASSWORD and S3_PHOTO_BUCKET before running.
    logger.info("Local testing: Simulating Lambda execution.")

    sample_watermark_event = {
        "Records": [
            {
                "messageId": "local-test-watermark-message-id-1",
                "body": json.dumps({
                    "type": "watermark",
                    "data": {"key": "photos/local-test.jpg"}
                }),
                "eventSource": "aws:sqs",
            }
        ]
    }

    try:
        print(lambda_handler(sample_watermark_event, None))
    except Exception as e_watermark:
        logger.error(f"Local test of 'watermark' workflow failed critically: {e_watermark}", exc_info=True)
