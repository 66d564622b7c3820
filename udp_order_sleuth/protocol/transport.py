import logging
import socket
import struct

logger = logging.getLogger(__name__)

ANY_INTERFACE = '0.0.0.0'
DEFAULT_TTL = 1


class TransportSetupError(OSError):
    pass


def resolve_group(host, port):
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    except socket.gaierror as e:
        raise TransportSetupError(f"Cannot resolve {host}:{port}: {e}") from e

    return infos[0][4]


def open_sender_socket(ttl=DEFAULT_TTL, interface=None, loopback=True):
    """
    Create a UDP socket ready to publish to a multicast group.

    Args:
        ttl (int): Multicast time-to-live (1 keeps traffic on the local segment)
        interface (str): Local IPv4 address to send from, None for the default route
        loopback (bool): Whether local receivers on this host see our datagrams

    Returns:
        socket.socket: The configured socket

    Raises:
        TransportSetupError: If any socket option is rejected
    """
    sock = None
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, struct.pack('B', ttl))
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 1 if loopback else 0)
        if interface:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(interface))
    except (OSError, struct.error) as e:
        if sock is not None:
            sock.close()
        raise TransportSetupError(f"Cannot configure multicast sender socket: {e}") from e

    logger.info(f"[TRANSPORT] Sender socket ready (ttl={ttl}, interface={interface or 'default'})")
    return sock


def open_receiver_socket(group, port, interface=None):
    """
    Bind to ``port`` and join ``group``.

    Raises:
        TransportSetupError: The group cannot be resolved, the port cannot be
            bound, or the membership request is refused
    """
    group_ip, port = resolve_group(group, port)

    local_if = interface or ANY_INTERFACE
    sock = None
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(('', port))
        mreq = struct.pack('4s4s', socket.inet_aton(group_ip), socket.inet_aton(local_if))
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
    except OSError as e:
        if sock is not None:
            sock.close()
        raise TransportSetupError(f"Cannot join multicast group {group_ip}:{port}: {e}") from e

    logger.info(f"[TRANSPORT] Joined {group_ip}:{port} on {local_if}")
    return sock
