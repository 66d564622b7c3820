import logging
import threading
from enum import Enum

logger = logging.getLogger(__name__)

INITIAL_SEQ_NUM = 1


class Verdict(Enum):
    IN_ORDER = "in_order"
    OUT_OF_ORDER = "out_of_order"
    DUPLICATE = "duplicate"


class Classification:
    def __init__(self, verdict, seq_no, expected, missed=0):
        self.verdict = verdict
        self.seq_no = seq_no
        self.expected = expected
        self.missed = missed

    @property
    def is_out_of_order(self):
        return self.verdict is Verdict.OUT_OF_ORDER

    @property
    def is_duplicate(self):
        return self.verdict is Verdict.DUPLICATE

    def __eq__(self, other):
        if not isinstance(other, Classification):
            return NotImplemented
        return (self.verdict, self.seq_no, self.expected, self.missed) == \
            (other.verdict, other.seq_no, other.expected, other.missed)

    def __repr__(self):
        return (f"Classification({self.verdict.name}, seq_no={self.seq_no}, "
                f"expected={self.expected}, missed={self.missed})")


class OutOfOrderDetector:
    """
    Tracks the next expected sequence number of a single multicast stream.

    A jump ahead is reported once and then forgiven: the expectation moves past
    the gap, so anything from the skipped range that shows up later is
    reported as a duplicate rather than a late arrival.
    """

    def __init__(self):
        self.expected_seq = INITIAL_SEQ_NUM
        self.lock = threading.Lock()

    @property
    def expected_seq_num(self):
        with self.lock:
            return self.expected_seq

    def classify(self, message):
        seq_no = message.seq_no

        with self.lock:
            expected = self.expected_seq

            if seq_no == expected:
                self.expected_seq = expected + 1
                result = Classification(Verdict.IN_ORDER, seq_no, expected)

            elif seq_no > expected:
                self.expected_seq = seq_no + 1
                result = Classification(Verdict.OUT_OF_ORDER, seq_no, expected,
                                        missed=seq_no - expected)

            else:
                result = Classification(Verdict.DUPLICATE, seq_no, expected)

        if result.is_out_of_order:
            logger.warning(f"[DETECTOR] OutOfOrder: Missed {result.missed} messages. "
                           f"Expected {expected} but received {seq_no}.")
        elif result.is_duplicate:
            logger.warning(f"[DETECTOR] Duplicate: Received duplicate message "
                           f"with sequence number {seq_no}.")
        else:
            logger.debug(f"[DETECTOR] IN_ORDER seq={seq_no}, expected→{expected + 1}")

        return result
