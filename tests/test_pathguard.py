import os

import pytest

from foldershare.errors import BadRequest, Forbidden
from foldershare.pathguard import (
    normalize_relative,
    parent_of,
    relative_to_root,
    resolve,
    resolve_upload_target,
    safe_filename,
)


def real(p):
    return os.path.realpath(str(p))


def test_empty_path_is_root(share_root):
    assert resolve(str(share_root), '') == real(share_root)
    assert resolve(str(share_root), None) == real(share_root)


@pytest.mark.parametrize('rel', ['notes.txt', 'pics', 'pics/../notes.txt', './pics/', 'pics/new/deeper'])
def test_paths_inside_root(share_root, rel):
    expected = os.path.normpath(os.path.join(real(share_root), rel))
    assert resolve(str(share_root), rel) == expected


@pytest.mark.parametrize('rel', ['..', '../', '../../etc', 'pics/../../x', 'pics/../../../etc/passwd'])
def test_traversal_is_forbidden(share_root, rel):
    with pytest.raises(Forbidden):
        resolve(str(share_root), rel)


def test_sibling_with_common_prefix_is_forbidden(share_root):
    evil = share_root.parent / (share_root.name + '-evil')
    evil.mkdir()
    (evil / 'secret.txt').write_text('nope')
    with pytest.raises(Forbidden):
        resolve(str(share_root), '../share-evil/secret.txt')


def test_absolute_client_path_stays_inside(share_root):
    assert resolve(str(share_root), '/etc/passwd') == os.path.join(real(share_root), 'etc', 'passwd')


def test_nul_byte_is_forbidden(share_root):
    with pytest.raises(Forbidden):
        resolve(str(share_root), 'notes.txt\x00.png')


def test_symlink_out_of_root_is_forbidden(share_root, tmp_path):
    outside = tmp_path / 'outside'
    outside.mkdir()
    try:
        os.symlink(str(outside), str(share_root / 'link'))
    except (OSError, NotImplementedError):
        pytest.skip('symlinks not supported here')
    with pytest.raises(Forbidden):
        resolve(str(share_root), 'link')


@pytest.mark.parametrize('raw,expected', [
    ('a.png', 'a.png'),
    ('photos/a.png', 'a.png'),
    ('C:\\Users\\me\\a.png', 'a.png'),
    ('../../a.png', 'a.png'),
    ('résumé.pdf', 'résumé.pdf'),
])
def test_safe_filename(raw, expected):
    assert safe_filename(raw) == expected


@pytest.mark.parametrize('raw', ['', '..', '.', 'dir/'])
def test_safe_filename_rejects_empty_names(raw):
    with pytest.raises(BadRequest):
        safe_filename(raw)


def test_upload_target(share_root):
    target_dir, target = resolve_upload_target(str(share_root), 'pics', 'a.png')
    assert target_dir == os.path.join(real(share_root), 'pics')
    assert target == os.path.join(real(share_root), 'pics', 'a.png')


def test_upload_target_outside_root(share_root):
    with pytest.raises(Forbidden):
        resolve_upload_target(str(share_root), '../elsewhere', 'a.png')


def test_upload_target_through_symlinked_file(share_root, tmp_path):
    victim = tmp_path / 'victim.txt'
    victim.write_text('keep me')
    try:
        os.symlink(str(victim), str(share_root / 'pics' / 'a.png'))
    except (OSError, NotImplementedError):
        pytest.skip('symlinks not supported here')
    with pytest.raises(Forbidden):
        resolve_upload_target(str(share_root), 'pics', 'a.png')


@pytest.mark.parametrize('raw,current,parent', [
    ('', '', None),
    ('pics', 'pics', ''),
    ('./pics/', 'pics', ''),
    ('/pics/2024', 'pics/2024', 'pics'),
    ('pics/2024/../2025', 'pics/2025', 'pics'),
])
def test_current_and_parent_path(raw, current, parent):
    assert normalize_relative(raw) == current
    assert parent_of(normalize_relative(raw)) == parent


def test_relative_to_root(share_root):
    path = os.path.join(str(share_root), 'pics', 'a.png')
    assert relative_to_root(str(share_root), path) == 'pics/a.png'
    assert relative_to_root(str(share_root), str(share_root)) == ''
