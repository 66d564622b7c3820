"""
Statistics Module

Thread-safe counters for both roles. The sender side has a reporter that
prints the running sent count on a fixed tick; the receiver side prints its
figures once, after the receive loop has stopped.
"""

import logging
import threading

DEFAULT_REPORT_INTERVAL = 5.0

logger = logging.getLogger(__name__)


class SendStatistics:
    def __init__(self):
        self._sent_count = 0
        self.lock = threading.Lock()

    def increment(self):
        with self.lock:
            self._sent_count += 1

    @property
    def sent_count(self):
        with self.lock:
            return self._sent_count


class SenderStatReporter:
    def __init__(self, stats=None, interval=DEFAULT_REPORT_INTERVAL):
        self.stats = stats if stats is not None else SendStatistics()
        self.interval = interval

        self.stop_event = threading.Event()
        self.report_thread = None

    def start(self):
        self.stop_event.clear()
        self.report_thread = threading.Thread(target=self._report_loop, name='stat-reporter')
        self.report_thread.daemon = True
        self.report_thread.start()

    def _report_loop(self):
        while not self.stop_event.wait(self.interval):
            print(f"Sent messages: {self.stats.sent_count}", flush=True)

    def increment(self):
        self.stats.increment()

    def stop(self):
        """Stop ticking and print the final count. Returns that count."""
        self.stop_event.set()
        if self.report_thread is not None and self.report_thread.is_alive():
            self.report_thread.join(timeout=self.interval + 1)

        sent_count = self.stats.sent_count
        print(f"Final count of sent messages: {sent_count}", flush=True)
        return sent_count


class ReceiverStatistics:
    def __init__(self):
        self.total_received = 0
        self.out_of_order_count = 0
        self.duplicate_count = 0
        self.malformed_count = 0
        self.truncated_count = 0
        self.missed_total = 0
        self.gap_events = []

        self.lock = threading.Lock()

    def increment_received(self):
        with self.lock:
            self.total_received += 1

    def increment_out_of_order(self):
        with self.lock:
            self.out_of_order_count += 1

    def increment_duplicate(self):
        with self.lock:
            self.duplicate_count += 1

    def increment_malformed(self):
        with self.lock:
            self.malformed_count += 1

    def increment_truncated(self):
        with self.lock:
            self.truncated_count += 1

    def record_gap(self, classification):
        with self.lock:
            self.missed_total += classification.missed
            self.gap_events.append({
                'received': classification.seq_no,
                'expected': classification.expected,
                'missed': classification.missed,
            })

    def snapshot(self):
        """
        Copy the current figures.

        Returns:
            dict: Counters plus the list of recorded gap events
        """
        with self.lock:
            return {
                'total_received': self.total_received,
                'out_of_order_count': self.out_of_order_count,
                'duplicate_count': self.duplicate_count,
                'malformed_count': self.malformed_count,
                'truncated_count': self.truncated_count,
                'missed_total': self.missed_total,
                'gap_events': [dict(event) for event in self.gap_events],
            }

    def report(self):
        stats = self.snapshot()

        print(f"Total Received Messages: {stats['total_received']}")
        print(f"Out of Order Messages: {stats['out_of_order_count']}")
        print(f"Missed Messages: {stats['missed_total']}")
        print(f"Duplicate Messages: {stats['duplicate_count']}")
        print(f"Malformed Messages (not in total received): {stats['malformed_count']}")
        print(f"Datagrams Seen: {stats['total_received'] + stats['malformed_count']}", flush=True)

        if stats['truncated_count']:
            logger.warning(f"[STATS] {stats['truncated_count']} datagrams were truncated")

        return stats
