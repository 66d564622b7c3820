"""
Configuration Module

Default values for both roles plus the parsing helpers the command line uses
to build a SleuthConfig. The config object is built once at startup and handed
to SenderApp / ReceiverApp; nothing below the apps reads these globals.
"""

import logging
import math
import re

from .protocol import message as msg
from .protocol.multicast_receiver import DEFAULT_POLL_TIMEOUT
from .protocol.transport import DEFAULT_TTL
from .statistics import DEFAULT_REPORT_INTERVAL

# ============================================================================
# NETWORK CONFIGURATION
# ============================================================================

# Multicast group the sender publishes to and the receiver joins
DEFAULT_ADDRESS = '225.0.0.250:5001'

# Largest datagram the receiver reads in one go (bytes)
BUFFER_SIZE = msg.MAX_DATAGRAM_SIZE

# Payload text carried by every sent message
PAYLOAD = msg.DEFAULT_PAYLOAD

# Multicast TTL for the sender (1 keeps traffic on the local segment)
TTL = DEFAULT_TTL

# ============================================================================
# TIMING CONFIGURATION
# ============================================================================

# Gap between two sent messages (seconds)
SEND_INTERVAL_SEC = 1.0

# Tick of the sender's periodic sent-count report (seconds)
REPORT_INTERVAL_SEC = DEFAULT_REPORT_INTERVAL

# Upper bound on how long a blocked read delays shutdown (seconds)
RECEIVE_POLL_TIMEOUT_SEC = DEFAULT_POLL_TIMEOUT

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

LOG_LEVEL = logging.INFO

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

ROLE_SENDER = 'sender'
ROLE_RECEIVER = 'receiver'

_DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


class ConfigError(ValueError):
    pass


def parse_duration(text):
    """
    Parse a duration such as ``10ms``, ``1.5s`` or ``1m30s`` into seconds.

    A bare number is taken as seconds.

    Args:
        text (str): Duration string

    Returns:
        float: The duration in seconds

    Raises:
        ConfigError: If the text is not a duration or is negative
    """
    text = str(text).strip()
    if not text:
        raise ConfigError("Empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        while pos < len(text):
            match = _DURATION_PART.match(text, pos)
            if not match:
                raise ConfigError(f"Invalid duration: {text!r}")
            seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()

    if not math.isfinite(seconds) or seconds < 0:
        raise ConfigError(f"Duration must be finite and not negative: {text!r}")

    return seconds


def parse_address(text):
    """Split ``host:port`` and validate the port."""
    host, sep, port_text = str(text).strip().rpartition(':')
    if not sep or not host:
        raise ConfigError(f"Address must look like HOST:PORT, got {text!r}")

    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"Invalid port in address {text!r}") from None

    if not 0 < port < 65536:
        raise ConfigError(f"Port out of range in address {text!r}")

    return host, port


class SleuthConfig:
    """
    Everything one run needs, for either role.

    Args:
        role (str): ROLE_SENDER or ROLE_RECEIVER
        address (str): Multicast group as HOST:PORT
        send_interval (float): Seconds between sent messages
        report_interval (float): Seconds between periodic sent-count reports
        payload (str): Payload tag carried by every message
        max_messages (int): Sender stops after this many messages, None for no limit
        ttl (int): Multicast TTL for the sender
        interface (str): Local IPv4 address to send from / join on
        buffer_size (int): Receive buffer in bytes
        poll_timeout (float): Socket read timeout of the receive loop
        results_file (str): Receiver writes its final figures here as JSON
    """

    def __init__(self, role, address=DEFAULT_ADDRESS, send_interval=SEND_INTERVAL_SEC,
                 report_interval=REPORT_INTERVAL_SEC, payload=PAYLOAD,
                 max_messages=None, ttl=TTL, interface=None, buffer_size=BUFFER_SIZE,
                 poll_timeout=RECEIVE_POLL_TIMEOUT_SEC, results_file=None):
        if role not in (ROLE_SENDER, ROLE_RECEIVER):
            raise ConfigError(f"Unknown role: {role!r}")

        self.role = role
        self.address = address
        self.host, self.port = parse_address(address)

        if send_interval < 0:
            raise ConfigError("Send interval must not be negative")
        if report_interval <= 0:
            raise ConfigError("Report interval must be positive")
        if max_messages is not None and max_messages < 1:
            raise ConfigError("Message count must be at least 1")
        if not 0 <= ttl <= 255:
            raise ConfigError("TTL must be between 0 and 255")
        if buffer_size < 1:
            raise ConfigError("Buffer size must be positive")
        if not poll_timeout > 0:
            raise ConfigError("Receive poll timeout must be positive")

        self.send_interval = send_interval
        self.report_interval = report_interval
        self.payload = payload
        self.max_messages = max_messages
        self.ttl = ttl
        self.interface = interface
        self.buffer_size = buffer_size
        self.poll_timeout = poll_timeout
        self.results_file = results_file

    @property
    def is_sender(self):
        return self.role == ROLE_SENDER

    def __repr__(self):
        return f"SleuthConfig(role={self.role!r}, address={self.address!r})"
