"""Keep every client-supplied path inside the share root.

Both the root and the candidate are canonicalised with ``os.path.realpath``,
so ``..`` segments and symlinks pointing outside the root are rejected the
same way. The containment test compares against ``root + os.sep``; a plain
prefix test would let ``/srv/share-evil`` pass for ``/srv/share``.
"""

import os
import posixpath

from .errors import BadRequest, Forbidden


def _canonical(path):
    return os.path.normcase(os.path.realpath(path))


def _inside(root, candidate):
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def _strip_client_path(relative):
    if relative is None:
        return ''
    if '\x00' in relative:
        raise Forbidden()
    # "/etc" from a client means "<root>/etc", like a URL path would
    return relative.lstrip('/\\')


def resolve(root, relative=''):
    """Return the absolute path of ``relative`` under ``root``.

    Raises ``Forbidden`` when the result would leave the root.
    """
    relative = _strip_client_path(relative)
    real_root = os.path.realpath(root)
    candidate = os.path.realpath(os.path.join(real_root, relative))
    if not _inside(os.path.normcase(real_root), os.path.normcase(candidate)):
        raise Forbidden()
    return candidate


def safe_filename(filename):
    """Reduce an uploaded filename to its last path component.

    Browsers on Windows used to send the full client path, and folder uploads
    send ``dir/name``; only the name is kept. Unicode names are kept as they
    are.
    """
    name = (filename or '').replace('\\', '/').rsplit('/', 1)[-1].strip()
    if '\x00' in name:
        raise Forbidden()
    if name in ('', '.', '..'):
        raise BadRequest(f'Invalid filename: {filename!r}')
    return name


def resolve_upload_target(root, subpath, filename):
    """Decide where an uploaded file lands, before any byte is written.

    Returns ``(target_dir, target_path)``. The directory may not exist yet.
    """
    target_dir = resolve(root, subpath)
    target = os.path.join(target_dir, safe_filename(filename))
    # an existing symlink with that name would redirect the write
    if not _inside(_canonical(root), _canonical(target)):
        raise Forbidden()
    return target_dir, target


def normalize_relative(relative):
    """POSIX-normalised form of a client path, ``''`` for the root."""
    relative = _strip_client_path(relative).replace(os.sep, '/')
    if not relative:
        return ''
    norm = posixpath.normpath(relative)
    return '' if norm == '.' else norm


def parent_of(relative):
    """Parent of a normalised relative path; ``None`` at the root."""
    if not relative:
        return None
    return posixpath.dirname(relative)


def relative_to_root(root, path):
    """Path of ``path`` relative to ``root`` with ``/`` separators."""
    rel = os.path.relpath(os.path.realpath(path), os.path.realpath(root))
    if rel == '.':
        return ''
    return rel.replace(os.sep, '/')
