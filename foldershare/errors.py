"""Error types raised by the share server.

Anything raised while answering a request is a ``ShareError`` subclass with an
HTTP ``status_code``; the Flask app turns it into ``{"error": message}``.
``InvalidFolder`` and ``BindError`` only surface from ``ShareSession.start``.
"""


class ShareError(Exception):
    status_code = 500
    default_message = 'Internal error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidFolder(ShareError):
    status_code = 400
    default_message = 'Folder does not exist or is not a directory'


class BindError(ShareError):
    status_code = 500
    default_message = 'Unable to bind the share server'


class BadRequest(ShareError):
    status_code = 400
    default_message = 'Bad request'


class Forbidden(ShareError):
    status_code = 403
    default_message = 'Access to this path is not allowed'


class NotFound(ShareError):
    status_code = 404
    default_message = 'Path not found'


class NotADirectory(ShareError):
    status_code = 404
    default_message = 'Path is not a directory'


class IsADirectory(ShareError):
    status_code = 400
    default_message = 'Path is a directory'


class NoActiveShare(ShareError):
    status_code = 409
    default_message = 'No folder is being shared'


class PayloadTooLarge(ShareError):
    status_code = 413
    default_message = 'Uploaded file is too large'


class StorageError(ShareError):
    """Unexpected disk failure (read, stat or write)."""
    status_code = 500
    default_message = 'Filesystem error'
