"""FolderShare: share one local folder over HTTP on the LAN."""

from .errors import (
    BadRequest,
    BindError,
    Forbidden,
    InvalidFolder,
    IsADirectory,
    NoActiveShare,
    NotADirectory,
    NotFound,
    PayloadTooLarge,
    ShareError,
    StorageError,
)
from .qr import ServerInfo
from .session import ShareSession

__version__ = '1.0.0'

__all__ = [
    'ShareSession',
    'ServerInfo',
    'ShareError',
    'InvalidFolder',
    'BindError',
    'BadRequest',
    'Forbidden',
    'NotFound',
    'NotADirectory',
    'IsADirectory',
    'NoActiveShare',
    'PayloadTooLarge',
    'StorageError',
]
