"""Flask routes for browsing, downloading, previewing and uploading files.

The app never holds the share root itself. Each request asks the injected
session for it, so one app instance survives any number of start/stop cycles.
"""

import logging
import os
import urllib.parse

from flask import Flask, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from .config import Settings
from .errors import (
    BadRequest,
    IsADirectory,
    NotADirectory,
    NotFound,
    PayloadTooLarge,
    ShareError,
    StorageError,
)
from .listing import list_directory
from .mime import preview_mimetype
from .pathguard import (
    normalize_relative,
    parent_of,
    relative_to_root,
    resolve,
    resolve_upload_target,
)

log = logging.getLogger(__name__)


def human_size(n):
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if n < 1024.0:
            return f"{n:3.1f} {unit}"
        n /= 1024.0
    return f"{n:.1f} PB"


def _stream_size(stream):
    """Size of a spooled upload part, or None if it cannot be measured."""
    try:
        pos = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell() - pos
        stream.seek(pos)
        return size
    except (AttributeError, OSError, ValueError):
        return None


def _discard(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning('Could not remove partial upload %s: %s', path, e)


def store_upload(part, dest, max_bytes, chunk_size):
    """Copy one multipart part to ``dest`` in chunks and return its size.

    Raises ``PayloadTooLarge`` without touching ``dest`` when the part is
    measurably over the limit; otherwise the count is enforced while copying
    and a partial file is removed.
    """
    name = os.path.basename(dest)
    too_large = PayloadTooLarge(f'{name} exceeds the {human_size(max_bytes)} upload limit')
    size = _stream_size(part.stream)
    if size is not None and size > max_bytes:
        part.close()
        raise too_large

    total = 0
    try:
        with open(dest, 'wb') as out:
            while True:
                chunk = part.stream.read(chunk_size)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise too_large
                out.write(chunk)
    except PayloadTooLarge:
        _discard(dest)
        raise
    except IsADirectoryError:
        raise IsADirectory(f'{name} already exists as a folder')
    except OSError as e:
        _discard(dest)
        raise StorageError(f'Failed to save {name}: {e.strerror or e}')
    finally:
        part.close()
    return total


def create_app(session, settings=None):
    """Build the Flask app serving whatever folder ``session`` shares.

    ``session`` only needs a ``root()`` method that returns the share root or
    raises ``NoActiveShare``.
    """
    settings = settings or Settings.from_env()
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_content_length

    @app.errorhandler(ShareError)
    def share_error(e):
        return jsonify({'error': e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        log.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500

    def existing_file(relative):
        if not relative:
            raise BadRequest('Missing path parameter')
        path = resolve(session.root(), relative)
        if not os.path.exists(path):
            raise NotFound('File not found')
        if os.path.isdir(path):
            raise IsADirectory('Folders cannot be downloaded or previewed')
        return path

    def send(path, **kwargs):
        try:
            resp = send_file(path, **kwargs)
        except FileNotFoundError:
            raise NotFound('File not found')
        except OSError as e:
            raise StorageError(f'Unable to read file: {e.strerror or e}')
        resp.headers['X-Content-Type-Options'] = 'nosniff'
        resp.headers['Cache-Control'] = 'no-cache'
        return resp

    @app.route('/')
    def index():
        return app.send_static_file('index.html')

    @app.route('/api/files')
    def files():
        root = session.root()
        relative = request.args.get('path', '')
        path = resolve(root, relative)
        if not os.path.exists(path):
            raise NotFound('Folder not found')
        if not os.path.isdir(path):
            raise NotADirectory()
        items = list_directory(path)
        current = normalize_relative(relative)
        return jsonify({
            'items': [item.to_dict() for item in items],
            'rootName': os.path.basename(os.path.normpath(root)) or root,
            'currentPath': current,
            'parentPath': parent_of(current),
        })

    @app.route('/api/download')
    def download():
        path = existing_file(request.args.get('path', ''))
        resp = send(path)
        quoted = urllib.parse.quote(os.path.basename(path), safe='')
        resp.headers['Content-Disposition'] = f'attachment; filename="{quoted}"'
        return resp

    @app.route('/api/preview')
    def preview():
        path = existing_file(request.args.get('path', ''))
        return send(path, mimetype=preview_mimetype(path))

    @app.route('/api/upload', methods=['POST'])
    def upload():
        root = session.root()
        subpath = request.form.get('path', '')
        # whole form is parsed by now, so field order does not matter
        target_dir = resolve(root, subpath)
        parts = [p for p in request.files.getlist('files') if p.filename]
        if not parts:
            raise BadRequest('No files uploaded')

        plan = [(part, resolve_upload_target(root, subpath, part.filename)[1]) for part in parts]
        try:
            os.makedirs(target_dir, exist_ok=True)
        except (FileExistsError, NotADirectoryError):
            raise NotADirectory('Upload target is not a folder')
        except OSError as e:
            raise StorageError(f'Unable to create folder: {e.strerror or e}')

        saved = []
        rejected = []
        first_status = None
        for part, dest in plan:
            try:
                size = store_upload(part, dest, settings.max_upload_bytes, settings.chunk_size)
            except ShareError as e:
                log.info('Rejected upload %s: %s', part.filename, e.message)
                rejected.append({'name': os.path.basename(dest), 'error': e.message})
                first_status = first_status or e.status_code
                continue
            rel = relative_to_root(root, dest)
            log.info('Stored upload %s (%s)', rel, human_size(size))
            saved.append({'name': os.path.basename(dest), 'size': size, 'path': rel})

        if not saved:
            return jsonify({'error': rejected[0]['error'], 'rejected': rejected}), first_status
        message = f'Uploaded {len(saved)} file(s)'
        if rejected:
            message += f', {len(rejected)} rejected'
        return jsonify({'success': True, 'message': message, 'files': saved, 'rejected': rejected})

    return app
