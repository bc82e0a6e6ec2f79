import json
from unittest.mock import MagicMock

import pytest

import main


def sqs_event(*messages):
    return {
        'Records': [
            {'messageId': f"msg-{i}", 'body': json.dumps(message)}
            for i, message in enumerate(messages)
        ]
    }


@pytest.fixture
def db_conn(monkeypatch):
    conn = MagicMock()
    monkeypatch.setattr(main, "initialize_config", lambda: None)
    monkeypatch.setattr(main, "get_db_connection", lambda: conn)
    return conn


def test_routes_watermark_messages(monkeypatch, db_conn):
    handler = MagicMock(return_value={'bucket': 'photos', 'key': 'a.png', 'watermarked': True})
    monkeypatch.setattr(main, "handle_watermark_workflow", handler)

    response = main.lambda_handler(sqs_event({'type': 'watermark', 'data': {'key': 'a.png'}}), None)

    assert response['statusCode'] == 200
    body = json.loads(response['body'])
    assert body['results'] == [
        {'messageId': 'msg-0', 'result': {'bucket': 'photos', 'key': 'a.png', 'watermarked': True}}
    ]
    handler.assert_called_once_with({'key': 'a.png'})
    db_conn.commit.assert_called_once()
    db_conn.close.assert_called_once()


def test_routes_settings_updates_with_shared_connection(monkeypatch, db_conn):
    handler = MagicMock(return_value={'enabled': True})
    monkeypatch.setattr(main, "handle_update_settings_workflow", handler)

    main.lambda_handler(sqs_event({'type': 'update_settings', 'data': json.dumps({'settings': {'enabled': True}})}), None)

    handler.assert_called_once_with({'settings': {'enabled': True}}, db_conn)


def test_unknown_message_type_is_skipped(db_conn):
    response = main.lambda_handler(sqs_event({'type': 'resize', 'data': {}}), None)
    assert response['statusCode'] == 200
    assert json.loads(response['body'])['results'] == []


def test_failure_rolls_back_and_reraises(monkeypatch, db_conn):
    monkeypatch.setattr(main, "handle_watermark_workflow", MagicMock(side_effect=ValueError("bad message")))

    with pytest.raises(ValueError):
        main.lambda_handler(sqs_event({'type': 'watermark', 'data': {}}), None)

    db_conn.rollback.assert_called_once()
    db_conn.commit.assert_not_called()
    db_conn.close.assert_called_once()


def test_configuration_failure_returns_500(monkeypatch):
    def broken():
        raise ValueError("Incomplete database configuration. Missing: DB_HOST")

    monkeypatch.setattr(main, "initialize_config", broken)
    response = main.lambda_handler(sqs_event({'type': 'watermark', 'data': {}}), None)
    assert response['statusCode'] == 500
    assert "DB_HOST" in response['body']
