"""Share URL, QR code and the ServerInfo snapshot handed to callers."""

import base64
import io
from dataclasses import dataclass

import qrcode


@dataclass(frozen=True)
class ServerInfo:
    url: str
    port: int
    local_ip: str
    qr_code: str
    shared_folder: str

    def to_dict(self):
        return {
            'url': self.url,
            'port': self.port,
            'localIP': self.local_ip,
            'qrCode': self.qr_code,
            'sharedFolder': self.shared_folder,
        }


def share_url(address, port):
    return f'http://{address}:{port}'


def qr_data_uri(data):
    """Render ``data`` as a PNG QR code and return it as a data URI."""
    img = qrcode.make(data)
    bio = io.BytesIO()
    img.save(bio, format='PNG')
    b64 = base64.b64encode(bio.getvalue()).decode('ascii')
    return f'data:image/png;base64,{b64}'


def print_qr_ascii(data, out=None):
    """Draw the QR code with block characters, for terminals."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(data)
    qr.make(fit=True)
    qr.print_ascii(out=out, invert=True)


def build_server_info(address, port, folder):
    url = share_url(address, port)
    return ServerInfo(
        url=url,
        port=port,
        local_ip=address,
        qr_code=qr_data_uri(url),
        shared_folder=folder,
    )
