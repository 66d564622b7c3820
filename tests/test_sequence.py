import threading

from udp_order_sleuth.protocol.sequence import SequenceGenerator


def test_generate_starts_at_one_and_increments():
    generator = SequenceGenerator()
    assert generator.current == 0

    values = [generator.generate() for _ in range(100)]

    assert values == list(range(1, 101))
    assert generator.current == 100


def test_concurrent_callers_get_distinct_gap_free_values():
    generator = SequenceGenerator()
    callers = 8
    per_caller = 500
    results = [[] for _ in range(callers)]
    barrier = threading.Barrier(callers)

    def worker(out):
        barrier.wait()
        for _ in range(per_caller):
            out.append(generator.generate())

    threads = [threading.Thread(target=worker, args=(results[i],)) for i in range(callers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    values = [v for out in results for v in out]
    total = callers * per_caller
    assert len(values) == total
    assert sorted(values) == list(range(1, total + 1))

    # Each caller sees its own values strictly increasing
    for out in results:
        assert out == sorted(out)
