import logging
import threading

from . import message as msg
from .sequence import SequenceGenerator

logger = logging.getLogger(__name__)


class MulticastSender:
    def __init__(self, socket, group_addr, send_interval, payload=msg.DEFAULT_PAYLOAD,
                 on_sent=None, max_messages=None):
        self.socket = socket
        self.group_addr = group_addr
        self.send_interval = send_interval
        self.payload = payload
        self.on_sent = on_sent
        self.max_messages = max_messages

        self.generator = SequenceGenerator()
        self.error = None

        self.stop_event = threading.Event()
        self.send_thread = None

        logger.info(f"[SENDER] Initialized (group={group_addr[0]}:{group_addr[1]}, "
                    f"interval={send_interval * 1000:.0f}ms)")

    def start(self):
        self.stop_event.clear()
        self.send_thread = threading.Thread(target=self._send_loop, name='multicast-sender')
        self.send_thread.daemon = True
        self.send_thread.start()

    def _send_loop(self):
        try:
            self.run()
        except (OSError, ValueError) as e:
            self.error = e
            logger.error(f"[SENDER] Send failed, stopping: {e}")

        logger.info("[SENDER] Send loop stopped.")

    def run(self):
        """
        Publish messages until stopped or ``max_messages`` have gone out.

        A failed write propagates out of the loop, nothing is retried.
        """
        sent = 0
        while not self.stop_event.is_set():
            seq_no = self.generator.generate()
            packet_bytes = msg.encode_message(seq_no, self.payload)

            self.socket.sendto(packet_bytes, self.group_addr)
            sent += 1

            if self.on_sent is not None:
                self.on_sent()

            logger.info(f"[SENDER] Sent: {packet_bytes.decode('utf-8')}")

            if self.max_messages is not None and sent >= self.max_messages:
                logger.info(f"[SENDER] Reached message limit ({self.max_messages})")
                break

            self.stop_event.wait(self.send_interval)

    def is_running(self):
        return self.send_thread is not None and self.send_thread.is_alive()

    def stop(self, timeout=2):
        self.stop_event.set()
        if self.send_thread is not None and self.send_thread.is_alive():
            self.send_thread.join(timeout=timeout)
