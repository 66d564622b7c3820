import json

from udp_order_sleuth import graphs

RESULTS = {
    'group': '225.0.0.250:5001',
    'total_received': 95,
    'out_of_order_count': 3,
    'missed_total': 5,
    'gap_events': [
        {'received': 10, 'expected': 9, 'missed': 1},
        {'received': 40, 'expected': 37, 'missed': 3},
        {'received': 80, 'expected': 79, 'missed': 1},
    ],
}


def test_gap_histogram():
    sizes, counts = graphs.gap_histogram(RESULTS['gap_events'])

    assert sizes.tolist() == [1, 3]
    assert counts.tolist() == [2, 1]


def test_gap_histogram_empty():
    sizes, counts = graphs.gap_histogram([])

    assert sizes.size == 0
    assert counts.size == 0


def test_plot_gap_summary_writes_image(tmp_path):
    output = tmp_path / "graphs" / "run.png"

    graphs.plot_gap_summary(RESULTS, str(output))

    assert output.exists()
    assert output.stat().st_size > 0


def test_plot_without_gaps(tmp_path):
    output = tmp_path / "clean.png"

    graphs.plot_gap_summary({'gap_events': [], 'total_received': 10}, str(output))

    assert output.exists()


def test_main_plots_results_file(tmp_path):
    results_file = tmp_path / "run1.json"
    results_file.write_text(json.dumps(RESULTS))
    output = tmp_path / "out.png"

    assert graphs.main([str(results_file), "--output", str(output)]) == 0
    assert output.exists()


def test_main_reports_missing_file(tmp_path, capsys):
    assert graphs.main([str(tmp_path / "missing.json")]) == 1
    assert "Cannot load" in capsys.readouterr().err


def test_gap_histogram_handles_huge_gap():
    gap_events = [
        {'received': 500000001, 'expected': 1, 'missed': 500000000},
        {'received': 500000010, 'expected': 500000008, 'missed': 2},
    ]

    sizes, counts = graphs.gap_histogram(gap_events)

    assert sizes.tolist() == [2, 500000000]
    assert counts.tolist() == [1, 1]
