import pytest

from foldershare.config import Settings
from foldershare.errors import NoActiveShare
from foldershare.server import create_app


class StaticSession:
    """Stands in for ShareSession: a fixed root, or no share at all."""

    def __init__(self, root):
        self._root = root

    def root(self):
        if self._root is None:
            raise NoActiveShare()
        return self._root


@pytest.fixture
def share_root(tmp_path):
    root = tmp_path / 'share'
    root.mkdir()
    (root / 'notes.txt').write_bytes(b'hello world\n')
    (root / 'pics').mkdir()
    return root


@pytest.fixture
def make_app(share_root):
    def make(root=share_root, **settings):
        return create_app(StaticSession(None if root is None else str(root)), Settings(**settings))
    return make


@pytest.fixture
def make_client(make_app, share_root):
    def make(root=share_root, **settings):
        return make_app(root, **settings).test_client()
    return make


@pytest.fixture
def client(make_client):
    return make_client()
