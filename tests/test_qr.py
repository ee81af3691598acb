import base64
import io

from foldershare.qr import build_server_info, print_qr_ascii, qr_data_uri, share_url


def test_share_url():
    assert share_url('192.168.1.5', 52000) == 'http://192.168.1.5:52000'


def test_qr_data_uri_is_png():
    uri = qr_data_uri('http://192.168.1.5:52000')
    prefix = 'data:image/png;base64,'
    assert uri.startswith(prefix)
    assert base64.b64decode(uri[len(prefix):])[:8] == b'\x89PNG\r\n\x1a\n'


def test_server_info():
    info = build_server_info('192.168.1.5', 52000, '/srv/share')
    assert info.url == 'http://192.168.1.5:52000'
    assert info.to_dict()['localIP'] == '192.168.1.5'
    assert set(info.to_dict()) == {'url', 'port', 'localIP', 'qrCode', 'sharedFolder'}
    assert info.qr_code.startswith('data:image/png;base64,')


def test_ascii_qr():
    out = io.StringIO()
    print_qr_ascii('http://192.168.1.5:52000', out=out)
    assert len(out.getvalue().splitlines()) > 10
