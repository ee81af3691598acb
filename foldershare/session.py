"""Lifecycle of the one folder being shared.

``ShareSession`` owns the Flask app, the background server and the current
share record. ``start``/``stop`` are serialised by a lock; ``get_status``
reads a single immutable record and never blocks.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .errors import InvalidFolder, NoActiveShare
from .network import pick_address, pick_port
from .qr import ServerInfo, build_server_info
from .server import create_app
from .serving import BackgroundServer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveShare:
    folder_path: str
    bound_address: str
    bound_port: int
    info: ServerInfo
    server: BackgroundServer


class ShareSession:
    def __init__(self, settings: Optional[Settings] = None, address_picker=pick_address):
        self.settings = settings or Settings.from_env()
        self._pick_address = address_picker
        self._transition = threading.Lock()
        self._active: Optional[ActiveShare] = None
        self.app = create_app(self, self.settings)

    # -- state read by the HTTP layer -------------------------------------

    @property
    def running(self):
        return self._active is not None

    @property
    def folder_path(self):
        active = self._active
        return active.folder_path if active else None

    @property
    def bound_address(self):
        active = self._active
        return active.bound_address if active else None

    @property
    def bound_port(self):
        active = self._active
        return active.bound_port if active else 0

    def root(self):
        active = self._active
        if active is None:
            raise NoActiveShare()
        return active.folder_path

    # -- transitions ------------------------------------------------------

    def start(self, folder_path) -> ServerInfo:
        """Share ``folder_path``, replacing whatever was shared before."""
        folder = os.path.realpath(os.path.expanduser(str(folder_path)))
        if not os.path.isdir(folder):
            raise InvalidFolder(f'Not a folder: {folder_path}')
        if not os.access(folder, os.R_OK | os.X_OK):
            raise InvalidFolder(f'Folder is not readable: {folder_path}')

        with self._transition:
            if self._active is not None:
                log.info('Replacing share of %s', self._active.folder_path)
                self._stop_locked()

            address = self._pick_address()
            port = self.settings.port or pick_port()
            server = BackgroundServer(self.app, self.settings.bind_host, port,
                                      drain_timeout=self.settings.drain_timeout)
            server.start()
            try:
                info = build_server_info(address, server.port, folder)
            except Exception:
                server.stop()
                raise
            self._active = ActiveShare(folder, address, server.port, info, server)
            log.info('Sharing %s at %s', folder, info.url)
            return info

    def stop(self):
        """Stop sharing. Does nothing when idle."""
        with self._transition:
            self._stop_locked()

    def _stop_locked(self):
        active = self._active
        if active is None:
            return
        # requests already accepted keep resolving against the old root until drained
        active.server.stop()
        self._active = None
        log.info('Stopped sharing %s (port %s released)', active.folder_path, active.bound_port)

    def get_status(self):
        active = self._active
        return {'running': active is not None, 'info': active.info if active else None}

    # names used by the desktop shell
    def start_server(self, folder_path) -> ServerInfo:
        return self.start(folder_path)

    def stop_server(self):
        self.stop()

    def is_running(self):
        return self.running

    def get_server_info(self) -> Optional[ServerInfo]:
        active = self._active
        return active.info if active else None
