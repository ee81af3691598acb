import pytest

from foldershare.config import DEFAULT_MAX_UPLOAD_BYTES, Settings


def test_defaults(monkeypatch):
    for name in ('FOLDERSHARE_PORT', 'FOLDERSHARE_BIND_HOST', 'FOLDERSHARE_MAX_UPLOAD_BYTES',
                 'FOLDERSHARE_MAX_CONTENT_LENGTH', 'FOLDERSHARE_DRAIN_TIMEOUT', 'FOLDERSHARE_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.port == 0
    assert s.bind_host == '0.0.0.0'
    assert s.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES == 100 * 1024 * 1024
    assert s.max_content_length is None
    assert s.log_level == 'INFO'


def test_environment(monkeypatch):
    monkeypatch.setenv('FOLDERSHARE_PORT', '8123')
    monkeypatch.setenv('FOLDERSHARE_MAX_UPLOAD_BYTES', '2048')
    monkeypatch.setenv('FOLDERSHARE_DRAIN_TIMEOUT', '2.5')
    monkeypatch.setenv('FOLDERSHARE_LOG_LEVEL', 'debug')
    s = Settings.from_env()
    assert s.port == 8123
    assert s.max_upload_bytes == 2048
    assert s.drain_timeout == 2.5
    assert s.log_level == 'DEBUG'


def test_bad_number(monkeypatch):
    monkeypatch.setenv('FOLDERSHARE_PORT', 'eighty')
    with pytest.raises(ValueError):
        Settings.from_env()


def test_override_skips_none():
    s = Settings(port=5000).override(port=None, bind_host='127.0.0.1')
    assert s.port == 5000
    assert s.bind_host == '127.0.0.1'
