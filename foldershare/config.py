"""Runtime settings, read from FOLDERSHARE_* environment variables."""

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024
DEFAULT_CHUNK_SIZE = 64 * 1024


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {raw!r}')


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number, got {raw!r}')


@dataclass(frozen=True)
class Settings:
    bind_host: str = '0.0.0.0'
    # 0 means "ask the network locator for an ephemeral port"
    port: int = 0
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_content_length: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    drain_timeout: float = 30.0
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            bind_host=os.environ.get('FOLDERSHARE_BIND_HOST', '0.0.0.0'),
            port=_env_int('FOLDERSHARE_PORT', 0),
            max_upload_bytes=_env_int('FOLDERSHARE_MAX_UPLOAD_BYTES', DEFAULT_MAX_UPLOAD_BYTES),
            max_content_length=_env_int('FOLDERSHARE_MAX_CONTENT_LENGTH', None),
            chunk_size=_env_int('FOLDERSHARE_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
            drain_timeout=_env_float('FOLDERSHARE_DRAIN_TIMEOUT', 30.0),
            log_level=os.environ.get('FOLDERSHARE_LOG_LEVEL', 'INFO').upper(),
        )

    def override(self, **changes) -> 'Settings':
        """Return a copy with every non-None keyword applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)
