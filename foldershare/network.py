"""Pick the LAN address and the TCP port a share is announced on."""

import logging
import re
import socket

import psutil

log = logging.getLogger(__name__)

# Virtual switches, container bridges and VPN tunnels are rarely reachable
# from a phone on the same Wi-Fi.
IGNORED_INTERFACE = re.compile(
    r'docker|virtual|vpn|loopback|wsl|vethernet|hyper-v|vmware|virtualbox'
    r'|tailscale|zerotier|^veth|^br-',
    re.IGNORECASE,
)

_PRIVATE_172 = re.compile(r'^172\.(1[6-9]|2\d|3[01])\.')


def score_address(ip):
    """Rank an IPv4 address by how likely it is to be the LAN address.

    Link-local addresses get a negative score and are never picked.
    """
    if ip.startswith('192.168.'):
        return 30
    if ip.startswith('10.'):
        return 20
    if _PRIVATE_172.match(ip):
        return 10
    if ip.startswith('169.254.'):
        return -100
    return 0


def _ipv4_interfaces():
    """Yield (interface name, address) for every up, non-loopback IPv4 address."""
    stats = psutil.net_if_stats()
    for name, addrs in psutil.net_if_addrs().items():
        st = stats.get(name)
        if st is not None and not st.isup:
            continue
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            if addr.address.startswith('127.'):
                continue
            yield name, addr.address


def _best(candidates):
    best = None
    for name, ip, score in candidates:
        if best is None or score > best[2]:
            best = (name, ip, score)
    return best


def pick_address(interfaces=None):
    """Return the IPv4 address other devices should use to reach us.

    ``interfaces`` is an iterable of ``(name, ip)`` pairs and defaults to the
    live interface table. Falls back to ``"localhost"``.
    """
    if interfaces is None:
        interfaces = list(_ipv4_interfaces())
    else:
        interfaces = list(interfaces)

    scored = [(name, ip, score_address(ip)) for name, ip in interfaces]
    scored = [c for c in scored if c[2] >= 0]

    best = _best(c for c in scored if not IGNORED_INTERFACE.search(c[0]))
    if best is None:
        # only virtual-looking interfaces are up; one of them still beats localhost
        best = _best(scored)
    if best is None:
        log.debug('No usable IPv4 interface found, falling back to localhost')
        return 'localhost'
    log.debug('Selected %s on interface %s', best[1], best[0])
    return best[1]


def pick_port(host=''):
    """Ask the OS for a free ephemeral TCP port.

    The probe socket is closed before returning, so another process could
    grab the port before the real server binds it.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        s.bind((host, 0))
        return s.getsockname()[1]
    finally:
        s.close()
