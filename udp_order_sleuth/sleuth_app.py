import json
import logging
import os
import time

from .protocol import message as msg
from .protocol.multicast_receiver import MulticastReceiver
from .protocol.multicast_sender import MulticastSender
from .protocol.order_detector import OutOfOrderDetector
from .protocol.transport import open_receiver_socket, open_sender_socket, resolve_group
from .statistics import ReceiverStatistics, SenderStatReporter

logger = logging.getLogger(__name__)


class SenderApp:
    def __init__(self, config, sock=None):
        self.config = config

        if sock is None:
            group_addr = resolve_group(config.host, config.port)
            sock = open_sender_socket(ttl=config.ttl, interface=config.interface)
        else:
            group_addr = (config.host, config.port)
        self.socket = sock

        self.stat_reporter = SenderStatReporter(interval=config.report_interval)
        self.sender = MulticastSender(
            self.socket,
            group_addr,
            config.send_interval,
            payload=config.payload,
            on_sent=self.stat_reporter.increment,
            max_messages=config.max_messages
        )
        self.started = False

    @property
    def stats(self):
        return self.stat_reporter.stats

    @property
    def error(self):
        return self.sender.error

    def start(self):
        self.stat_reporter.start()
        self.sender.start()
        self.started = True
        logger.info(f"[SENDER_APP] Sending to {self.config.address}")

    def is_running(self):
        return self.sender.is_running()

    def stop(self):
        """Halt the send loop and the reporter, print the final count, release the socket."""
        logger.info("[SENDER_APP] Stopping...")
        self.sender.stop()
        sent_count = self.stat_reporter.stop()
        self.socket.close()
        self.started = False
        return sent_count


class ReceiverApp:
    def __init__(self, config, sock=None):
        self.config = config

        if sock is None:
            sock = open_receiver_socket(config.host, config.port, interface=config.interface)
        self.socket = sock

        self.detector = OutOfOrderDetector()
        self.stats = ReceiverStatistics()
        self.receiver = MulticastReceiver(
            self.socket,
            self._on_message,
            buffer_size=config.buffer_size,
            poll_timeout=config.poll_timeout,
            on_truncated=self.stats.increment_truncated
        )
        self.session_start = None

    def start(self):
        self.session_start = time.time()
        self.receiver.start()
        logger.info(f"[RECEIVER_APP] Listening on {self.config.address}")

    def is_running(self):
        return self.receiver.is_running()

    def _on_message(self, packet_bytes, addr):
        try:
            message = msg.decode_message(packet_bytes)
        except msg.MalformedMessageError as e:
            self.stats.increment_malformed()
            logger.warning(f"[RECEIVER_APP] Discarding message from {addr[0]}:{addr[1]}: {e}")
            return

        result = self.detector.classify(message)

        self.stats.increment_received()
        if result.is_out_of_order:
            self.stats.increment_out_of_order()
            self.stats.record_gap(result)
        elif result.is_duplicate:
            self.stats.increment_duplicate()

    def stop(self):
        """Stop the receive loop, then print the final figures and export them if asked."""
        self.receiver.stop()

        stats = self.stats.report()
        if self.config.results_file:
            try:
                self.save_results(self.config.results_file, stats)
            except OSError as e:
                logger.error(f"[RECEIVER_APP] Cannot write results to {self.config.results_file}: {e}")
        return stats

    def save_results(self, path, stats=None):
        if stats is None:
            stats = self.stats.snapshot()

        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        results = dict(stats)
        results['group'] = self.config.address
        results['session_start'] = self.session_start
        results['session_end'] = time.time()
        results['expected_seq_num'] = self.detector.expected_seq_num

        with open(path, 'w') as f:
            json.dump(results, f, indent=2)

        logger.info(f"[RECEIVER_APP] Results written to {path}")
        return results
