"""Read a directory into a sorted list of entries.

Nothing is cached. Every request reads the folder from disk again.
"""

import datetime
import locale
import logging
import os
import stat
from dataclasses import dataclass
from typing import List, Optional

from .errors import NotADirectory, NotFound, StorageError

log = logging.getLogger(__name__)

FILE = 'file'
DIRECTORY = 'directory'


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    kind: str
    size_bytes: int
    modified_at: str
    extension: Optional[str]

    def to_dict(self):
        return {
            'name': self.name,
            'type': self.kind,
            'size': self.size_bytes,
            'modified': self.modified_at,
            'extension': self.extension,
        }


def _iso_utc(ts):
    dt = datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def sort_key(entry):
    """Directories first, then names in locale order, case-insensitively."""
    return (
        0 if entry.kind == DIRECTORY else 1,
        locale.strxfrm(entry.name.casefold()),
        entry.name,
    )


def _read(path):
    entries = []
    with os.scandir(path) as it:
        for child in it:
            try:
                st = child.stat()
            except FileNotFoundError:
                # dangling symlink, or deleted while we were listing
                continue
            if stat.S_ISDIR(st.st_mode):
                entries.append(DirectoryEntry(child.name, DIRECTORY, 0, _iso_utc(st.st_mtime), None))
            else:
                ext = os.path.splitext(child.name)[1].lower()
                entries.append(DirectoryEntry(child.name, FILE, st.st_size, _iso_utc(st.st_mtime), ext))
    entries.sort(key=sort_key)
    return entries


def list_directory(path) -> List[DirectoryEntry]:
    """List the direct children of ``path``.

    Raises ``NotFound`` if the directory is gone, ``NotADirectory`` if it is
    a file, and ``StorageError`` if reading fails twice in a row.
    """
    for attempt in (1, 2):
        try:
            return _read(path)
        except FileNotFoundError:
            raise NotFound()
        except NotADirectoryError:
            raise NotADirectory()
        except OSError as e:
            if attempt == 2:
                log.error('Listing %s failed: %s', path, e)
                raise StorageError(f'Unable to read folder: {e.strerror or e}')
            log.debug('Listing %s failed (%s), retrying once', path, e)
