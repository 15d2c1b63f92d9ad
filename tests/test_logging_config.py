"""Tests for logging setup and secret masking."""

import logging

from common.logging_config import SensitiveDataFilter, get_logger, setup_logging


def _record(msg, args=None):
    return logging.LogRecord('test', logging.INFO, __file__, 1, msg, args, None)


def test_masks_private_key_in_message():
    record = _record('upload done privateKey=abc123 publicKey=xyz')
    SensitiveDataFilter().filter(record)
    assert 'abc123' not in record.msg
    assert 'publicKey=xyz' in record.msg


def test_masks_owner_token_in_args():
    record = _record('payload %s', ('{"owner_token": "s3cr3t"}',))
    SensitiveDataFilter().filter(record)
    assert 's3cr3t' not in record.args[0]
    assert '***MASKED***' in record.args[0]


def test_leaves_plain_messages_alone():
    record = _record('Uploaded a.txt (2 bytes)')
    assert SensitiveDataFilter().filter(record) is True
    assert record.msg == 'Uploaded a.txt (2 bytes)'


def test_setup_logging_is_idempotent():
    first = setup_logging('fileshare-test', 'DEBUG')
    second = setup_logging('fileshare-test', 'DEBUG')

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG
    assert second.propagate is False


def test_module_loggers_share_component_handlers():
    setup_logging('fileshare-test')
    child = get_logger('fileshare-test.blob_storage')
    assert child.parent is logging.getLogger('fileshare-test')
