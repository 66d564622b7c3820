import logging
import socket
import time

import pytest


class LossySocket:
    """Wraps a UDP socket and silently drops the sends whose 1-based index is in ``drop``."""

    def __init__(self, sock, drop=()):
        self.sock = sock
        self.drop = set(drop)
        self.calls = 0

    def sendto(self, data, addr):
        self.calls += 1
        if self.calls in self.drop:
            return len(data)
        return self.sock.sendto(data, addr)

    def close(self):
        self.sock.close()


def _wait_until(predicate, timeout=2.0, interval=0.01):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def receiver_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    yield sock
    sock.close()


@pytest.fixture
def sender_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    yield sock
    sock.close()


@pytest.fixture
def lossy_socket(sender_socket):
    def make(drop):
        return LossySocket(sender_socket, drop)
    return make


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
