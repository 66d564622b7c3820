import threading


class SequenceGenerator:
    """Hands out 1, 2, 3, ... to any number of concurrent callers."""

    def __init__(self):
        self.next_seq = 0
        self.lock = threading.Lock()

    def generate(self):
        with self.lock:
            self.next_seq += 1
            return self.next_seq

    @property
    def current(self):
        with self.lock:
            return self.next_seq
