"""
Parameter Scan Tests
Driver behaviour: aggregation, seeding, failure isolation and persistence.
"""
import math
import os

import numpy as np
import pytest

from dipolarrsa.engine import InvalidArgumentError
from dipolarrsa.model.io import IOManager
from dipolarrsa.model.state import ScanSettings, ScanState, length_grid
from dipolarrsa.scan import driver
from dipolarrsa.scan.driver import ParameterScan, run_replica_chunk


def test_forced_orientation_scan_is_deterministic():
    settings = ScanSettings(p_plus_minus=1.0, lengths=[0.5, 1.0, 3.0], n_replicas=20, max_rounds=100, seed=1)
    state = ParameterScan(settings).run()

    assert state.completed == 3
    np.testing.assert_array_equal(state.lengths, [0.5, 1.0, 3.0])
    np.testing.assert_array_equal(state.means, [0.0, 1.0, 3.0])
    np.testing.assert_array_equal(state.variances, [0.0, 0.0, 0.0])
    assert not state.failed_lengths


def test_seeded_scans_are_reproducible():
    settings = dict(p_plus_minus=0.5, lengths=[4.0, 7.5], n_replicas=200, max_rounds=1000, seed=123)
    a = ParameterScan(ScanSettings(**settings)).run()
    b = ParameterScan(ScanSettings(**settings)).run()
    assert a.results == b.results


def test_repeated_runs_of_one_scan_are_identical():
    scan = ParameterScan(
        ScanSettings(p_plus_minus=0.3, lengths=[20.3, 9.7], n_replicas=200, max_rounds=1000, seed=123)
    )
    first = list(scan.run().results)
    second = list(scan.run().results)
    assert first == second


def test_run_length_is_repeatable():
    scan = ParameterScan(ScanSettings(p_plus_minus=0.3, lengths=[20.3], n_replicas=200, max_rounds=1000, seed=123))
    assert scan.run_length(0) == scan.run_length(0)


def test_unseeded_scan_repeats_its_own_streams():
    scan = ParameterScan(ScanSettings(p_plus_minus=0.5, lengths=[15.0], n_replicas=50, max_rounds=1000))
    assert scan.run_length(0) == scan.run_length(0)


def test_lengths_draw_from_distinct_streams():
    scan = ParameterScan(ScanSettings(p_plus_minus=0.5, lengths=[12.0, 12.0], n_replicas=300, max_rounds=1000, seed=5))
    a, b = scan.run().results
    assert a != b


def test_chunking_keeps_sample_size(monkeypatch):
    monkeypatch.setattr(driver, "REPLICA_CHUNK", 4)
    scan = ParameterScan(ScanSettings(p_plus_minus=0.5, lengths=[6.0], n_replicas=25, max_rounds=1000, seed=9))

    chunks = scan._chunks(0)
    assert [size for size, _ in chunks] == [4, 4, 4, 4, 4, 4, 1]
    assert len({seed.spawn_key for _, seed in chunks}) == 7
    assert scan.run().results[0].n_replicas == 25


def test_worker_pool_matches_serial_run():
    settings = dict(p_plus_minus=0.3, lengths=[2.0, 5.0], n_replicas=50, max_rounds=1000, seed=77)
    serial = ParameterScan(ScanSettings(workers=1, **settings)).run()
    pooled = ParameterScan(ScanSettings(workers=2, **settings)).run()
    assert serial.results == pooled.results


def test_replica_chunk_counts():
    counts = run_replica_chunk(3.0, 1.0, 100, 8, np.random.SeedSequence(0))
    assert counts.dtype == np.int64
    np.testing.assert_array_equal(counts, [3] * 8)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(p_plus_minus=1.5),
        dict(max_rounds=-1),
        dict(n_replicas=0),
        dict(workers=0),
        dict(lengths=[]),
    ],
)
def test_scan_invariant_errors_abort_before_any_replica(overrides, monkeypatch):
    calls = []
    monkeypatch.setattr(driver, "run_replica_chunk", lambda *args: calls.append(args))

    base = dict(p_plus_minus=0.5, lengths=[1.0, 2.0], n_replicas=5, max_rounds=10)
    base.update(overrides)
    with pytest.raises(InvalidArgumentError):
        ParameterScan(ScanSettings(**base)).run()
    assert calls == []


def test_invalid_length_only_skips_that_length():
    settings = ScanSettings(p_plus_minus=1.0, lengths=[1.0, -2.0, 3.0], n_replicas=5, max_rounds=100, seed=0)
    state = ParameterScan(settings).run()

    assert state.completed == 3
    assert state.failed_lengths == [-2.0]
    assert state.results[0].mean == 1.0
    assert math.isnan(state.results[1].mean)
    assert state.results[2].mean == 3.0


def test_zero_length_row():
    settings = ScanSettings(p_plus_minus=0.5, lengths=[0.0], n_replicas=3, max_rounds=10, seed=0)
    row = ParameterScan(settings).run().results[0]
    assert row.mean == 0.0
    assert math.isnan(row.std_coverage)


def test_progress_is_reported_per_length():
    seen = []
    settings = ScanSettings(p_plus_minus=1.0, lengths=[1.0, 2.0, 3.0, 4.0], n_replicas=2, max_rounds=100)
    ParameterScan(settings, on_progress=lambda pct, msg: seen.append(pct)).run()
    assert seen == [25, 50, 75, 100]


def test_state_progress_fraction():
    state = ScanState(settings=ScanSettings(lengths=[1.0, 2.0, 3.0, 4.0]))
    assert state.progress == 0.0
    state.record_failure(1.0)
    assert state.progress == 0.25
    assert ScanState(settings=ScanSettings(lengths=[])).progress == 1.0


def test_state_is_persisted_after_every_length(tmp_path):
    path = str(tmp_path / "scan.h5")
    snapshots = []

    def on_progress(pct, msg):
        snapshots.append(IOManager.load_scan(path).completed)

    settings = ScanSettings(
        p_plus_minus=0.5, lengths=[1.5, 2.5, 3.5], n_replicas=10, max_rounds=100, seed=4, output_path=path
    )
    state = ParameterScan(settings, on_progress=on_progress).run()

    assert snapshots == [1, 2, 3]
    loaded = IOManager.load_scan(path)
    assert loaded.results == state.results
    assert [name for name in os.listdir(tmp_path)] == ["scan.h5"]


def test_rerun_resets_previous_results():
    settings = ScanSettings(p_plus_minus=1.0, lengths=[1.0], n_replicas=2, max_rounds=10)
    state = ScanState(settings=settings)
    scan = ParameterScan(settings, state=state)
    scan.run()
    scan.run()
    assert state.completed == 1


def test_length_grid_is_inclusive_and_clean():
    grid = length_grid(0.02, 63.0, 0.02)
    assert len(grid) == 3150
    assert grid[0] == 0.02
    assert grid[-1] == 63.0
    assert grid[2] == 0.06

    assert length_grid(1.0, 1.0, 0.5) == [1.0]
    with pytest.raises(ValueError):
        length_grid(0.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        length_grid(2.0, 1.0, 0.1)


def test_default_settings_follow_reference_scan():
    settings = ScanSettings()
    assert settings.p_plus_minus == 0.5
    assert settings.max_rounds == 100_000
    assert settings.n_replicas == 2_000_000
    assert settings.lengths[-1] == 63.0
