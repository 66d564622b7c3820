import threading
import time

from udp_order_sleuth.protocol.order_detector import Classification, Verdict
from udp_order_sleuth.statistics import ReceiverStatistics, SendStatistics, SenderStatReporter


def test_send_statistics_counts_concurrent_increments():
    stats = SendStatistics()

    def worker():
        for _ in range(1000):
            stats.increment()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert stats.sent_count == 4000


def test_reporter_prints_periodic_and_final_counts(capsys):
    reporter = SenderStatReporter(interval=0.05)
    reporter.start()

    reporter.increment()
    reporter.increment()
    reporter.increment()
    time.sleep(0.3)

    final = reporter.stop()
    out = capsys.readouterr().out

    assert final == 3
    assert "Sent messages: 3" in out
    assert out.rstrip().endswith("Final count of sent messages: 3")
    assert not reporter.report_thread.is_alive()


def test_reporter_stops_ticking_after_stop(capsys):
    reporter = SenderStatReporter(interval=0.02)
    reporter.start()
    time.sleep(0.1)
    reporter.stop()
    capsys.readouterr()

    time.sleep(0.1)

    assert capsys.readouterr().out == ""


def test_reporter_stop_without_start(capsys):
    reporter = SenderStatReporter()
    reporter.increment()

    assert reporter.stop() == 1
    assert "Final count of sent messages: 1" in capsys.readouterr().out


def test_receiver_statistics_report(capsys):
    stats = ReceiverStatistics()
    for _ in range(4):
        stats.increment_received()
    stats.increment_out_of_order()
    stats.record_gap(Classification(Verdict.OUT_OF_ORDER, 4, 3, missed=1))
    stats.increment_duplicate()
    stats.increment_malformed()

    snapshot = stats.report()
    out = capsys.readouterr().out

    assert "Total Received Messages: 4" in out
    assert "Out of Order Messages: 1" in out
    assert "Missed Messages: 1" in out
    assert "Duplicate Messages: 1" in out
    assert "Malformed Messages (not in total received): 1" in out
    assert "Datagrams Seen: 5" in out
    assert snapshot['gap_events'] == [{'received': 4, 'expected': 3, 'missed': 1}]


def test_snapshot_is_a_copy():
    stats = ReceiverStatistics()
    stats.record_gap(Classification(Verdict.OUT_OF_ORDER, 5, 2, missed=3))

    snapshot = stats.snapshot()
    snapshot['gap_events'][0]['missed'] = 99
    snapshot['gap_events'].clear()

    assert stats.snapshot()['gap_events'] == [{'received': 5, 'expected': 2, 'missed': 3}]
    assert stats.snapshot()['missed_total'] == 3
