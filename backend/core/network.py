import ipaddress
import socket
from typing import Iterable, List

FALLBACK_IP = "0.0.0.0"
PROBE_TARGET = ("10.255.255.255", 1)  # never contacted, only used to pick a route

def _route_probe() -> List[str]:
    # connect() on a UDP socket sends nothing, it just binds a source address
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(PROBE_TARGET)
        return [sock.getsockname()[0]]
    except OSError:
        return []
    finally:
        sock.close()

def _hostname_addresses() -> List[str]:
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        return []
    return [info[4][0] for info in infos]

def is_external_ipv4(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return (
        ip.version == 4
        and not ip.is_loopback
        and not ip.is_unspecified
        and not ip.is_link_local
    )

def pick_address(candidates: Iterable[str]) -> str:
    for address in candidates:
        if is_external_ipv4(address):
            return address
    return FALLBACK_IP

def get_local_ip() -> str:
    """Address other machines on the LAN can reach us at (banner text only)."""
    return pick_address(_route_probe() + _hostname_addresses())
