"""Run a WSGI app on werkzeug's threaded server in a background thread."""

import logging
import threading

from werkzeug.serving import make_server
from werkzeug.wsgi import ClosingIterator

from .errors import BindError

log = logging.getLogger(__name__)


class InFlightCounter:
    """Counts requests whose response body has not been closed yet."""

    def __init__(self):
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self):
        with self._cond:
            return self._count

    def enter(self):
        with self._cond:
            self._count += 1

    def leave(self):
        with self._cond:
            self._count -= 1
            if self._count <= 0:
                self._cond.notify_all()

    def wait_idle(self, timeout=None):
        with self._cond:
            return self._cond.wait_for(lambda: self._count <= 0, timeout=timeout)


class TrackingMiddleware:
    """Wrap a WSGI app so every request is counted until its body is closed.

    werkzeug closes the response iterable when a client disconnects too, so
    aborted downloads are released as well.
    """

    def __init__(self, app, counter):
        self.app = app
        self.counter = counter

    def __call__(self, environ, start_response):
        self.counter.enter()
        try:
            app_iter = self.app(environ, start_response)
        except BaseException:
            self.counter.leave()
            raise
        return ClosingIterator(app_iter, [self.counter.leave])


class BackgroundServer:
    def __init__(self, app, host, port, drain_timeout=30.0):
        self.host = host
        self.requested_port = port
        self.drain_timeout = drain_timeout
        self.in_flight = InFlightCounter()
        self._app = TrackingMiddleware(app, self.in_flight)
        self._server = None
        self._thread = None

    @property
    def port(self):
        return self._server.server_port if self._server else None

    def start(self):
        try:
            self._server = make_server(self.host, self.requested_port, self._app, threaded=True)
        except OSError as e:
            raise BindError(f'Cannot listen on {self.host}:{self.requested_port}: {e.strerror or e}') from e
        except SystemExit as e:
            # werkzeug reports bind failures on stderr and exits instead of raising
            raise BindError(f'Cannot listen on {self.host}:{self.requested_port}') from e
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name=f'foldershare-{self.port}',
            daemon=True,
        )
        self._thread.start()
        log.debug('Listening on %s:%s', self.host, self.port)

    def stop(self):
        """Stop accepting, release the port, then wait for open requests."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.shutdown()
        server.server_close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if not self.in_flight.wait_idle(self.drain_timeout):
            log.warning('%d request(s) still running after %.0fs, not waiting any longer',
                        self.in_flight.count, self.drain_timeout)
