# nosec B101


import json
import logging

import pytest
from pydantic import ValidationError

from config.logging import JSONFormatter, setup_logging
from config.settings import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.CACHE_TTL_SECONDS == 3600
    assert settings.FRESHNESS_WINDOW_SECONDS == 3600
    assert settings.RETRY_MAX_ATTEMPTS == 3
    assert settings.PROVIDER_TIMEOUT_SECONDS == 5.0


def test_reads_environment(monkeypatch):
    monkeypatch.setenv('FRESHNESS_WINDOW_SECONDS', '600')
    monkeypatch.setenv('supported_currencies', 'usd, eur ,,gbp')

    settings = Settings(_env_file=None)

    assert settings.FRESHNESS_WINDOW_SECONDS == 600
    assert settings.supported_currency_codes == ['USD', 'EUR', 'GBP']


def test_rejects_zero_concurrency():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, PROVIDER_MAX_CONCURRENCY=0)


def test_json_formatter_outputs_json():
    record = logging.LogRecord('engine', logging.WARNING, __file__, 10, 'rate %s', ('0.85',), None)

    entry = json.loads(JSONFormatter().format(record))

    assert entry['level'] == 'WARNING'
    assert entry['logger'] == 'engine'
    assert entry['message'] == 'rate 0.85'


def test_json_formatter_includes_exception():
    try:
        raise ValueError('bad')
    except ValueError:
        import sys
        record = logging.LogRecord('engine', logging.ERROR, __file__, 10, 'failed', (), sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))

    assert entry['exception']['type'] == 'ValueError'
    assert entry['exception']['message'] == 'bad'


def test_setup_logging_configures_root():
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level
    try:
        setup_logging('DEBUG', json_output=True)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger('httpx').level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
