import logging
import socket
import threading

from . import message as msg

logger = logging.getLogger(__name__)

DEFAULT_POLL_TIMEOUT = 0.5

WSAEMSGSIZE = 10040


class MulticastReceiver:
    def __init__(self, socket, handler, buffer_size=msg.MAX_DATAGRAM_SIZE,
                 poll_timeout=DEFAULT_POLL_TIMEOUT, on_truncated=None):
        self.socket = socket
        self.handler = handler
        self.buffer_size = buffer_size
        self.poll_timeout = poll_timeout
        self.on_truncated = on_truncated

        self.running = False
        self.recv_thread = None

        logger.info(f"[RECEIVER] Initialized (buffer={buffer_size}B)")

    def start(self):
        self.running = True
        self.socket.settimeout(self.poll_timeout)
        self.recv_thread = threading.Thread(target=self._recv_loop, name='multicast-receiver')
        self.recv_thread.daemon = True
        self.recv_thread.start()

    def _recv_loop(self):
        while self.running:
            try:
                # One extra byte tells an exactly-full datagram from a cut one
                packet_bytes, addr = self.socket.recvfrom(self.buffer_size + 1)
            except socket.timeout:
                continue
            except OSError as e:
                if getattr(e, 'winerror', None) == WSAEMSGSIZE:
                    # Windows drops the oversize datagram instead of cutting it
                    logger.warning(f"[RECEIVER] Datagram exceeds {self.buffer_size}B, "
                                   f"discarded (Windows error 10040)")
                    if self.on_truncated is not None:
                        self.on_truncated()
                    continue
                if self.running:
                    logger.error(f"[RECEIVER] Error reading: {e}")
                continue

            if len(packet_bytes) > self.buffer_size:
                packet_bytes = packet_bytes[:self.buffer_size]
                logger.warning(f"[RECEIVER] Datagram from {addr[0]}:{addr[1]} exceeds "
                               f"{self.buffer_size}B, truncated")
                if self.on_truncated is not None:
                    self.on_truncated()

            logger.info(f"[RECEIVER] Received message: "
                        f"{packet_bytes.decode('utf-8', errors='replace')}")

            self.handler(packet_bytes, addr)

        logger.info("[RECEIVER] Receive loop stopped.")

    def is_running(self):
        return self.recv_thread is not None and self.recv_thread.is_alive()

    def stop(self, timeout=2):
        logger.info("[RECEIVER] Stopping receiver...")
        self.running = False

        if self.recv_thread is not None and self.recv_thread.is_alive():
            self.recv_thread.join(timeout=timeout)

        self.socket.close()
        logger.info("[RECEIVER] Receiver stopped.")
