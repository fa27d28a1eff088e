"""Time alignment: tolerance window, first-in-order policy, vectorised agreement."""

import numpy as np
import pandas as pd
import pytest

from hostcaplogic import align
from hostcaplogic.exceptions import AlignmentError
from hostcaplogic.series import NetLoadSeries, SolarPerUnitSeries

HOUR_MS = 3_600_000


def _load(ms, values=None):
    values = values if values is not None else [float(i) for i in range(len(ms))]
    return NetLoadSeries(np.asarray(ms, dtype=np.int64), np.asarray(values, dtype=float))


def _solar(ms):
    return SolarPerUnitSeries(np.asarray(ms, dtype=np.int64), np.ones(len(ms)))


@pytest.mark.parametrize(
    "offset_ms, matched",
    [
        (3_599_999, True),
        (-3_599_999, True),
        (3_600_000, False),
        (3_600_001, False),
        (-3_600_001, False),
    ],
)
def test_tolerance_is_strict_one_hour(t0_ms, offset_ms, matched):
    """A single load sample at t0; solar offset by just under/at/over one hour."""
    load = _load([t0_ms])
    solar = _solar([t0_ms + offset_ms])
    point = solar[0]
    hit = align.first_within_tolerance(point, load)
    assert (hit is not None) is matched
    assert bool(align.match_indices(load, solar)[0] >= 0) is matched


def test_first_in_order_wins_over_closer_sample(t0_ms):
    """
    Input: load at t0 and t0+1h; solar at t0+50min.
    Expect: 'first' returns t0 (in window, earlier in sequence) although t0+1h
    is closer; 'nearest' returns t0+1h.
    """
    load = _load([t0_ms, t0_ms + HOUR_MS], [-1.0, -2.0])
    solar = _solar([t0_ms + 3_000_000])

    first = align.first_within_tolerance(solar[0], load)
    nearest = align.nearest_within_tolerance(solar[0], load)
    assert first is not None and first.value == -1.0
    assert nearest is not None and nearest.value == -2.0

    assert align.match_indices(load, solar, policy="first").tolist() == [0]
    assert align.match_indices(load, solar, policy="nearest").tolist() == [1]


def test_nearest_ties_go_to_earlier_sample(t0_ms):
    load = _load([t0_ms, t0_ms + HOUR_MS])
    solar = _solar([t0_ms + HOUR_MS // 2])
    assert align.match_indices(load, solar, policy="nearest").tolist() == [0]


def test_vectorised_matches_scalar_policy(t0_ms):
    """Irregular load timeline with gaps; every solar sample checked both ways."""
    load_ms = [t0_ms + k * HOUR_MS for k in (0, 1, 2, 5, 6, 10)]
    load = _load(load_ms)
    solar_ms = [t0_ms + k * 1_800_000 for k in range(-3, 25)]
    solar = _solar(solar_ms)

    positions = align.match_indices(load, solar)
    for i, pos in enumerate(positions):
        hit = align.first_within_tolerance(solar[i], load)
        if pos < 0:
            assert hit is None
        else:
            assert hit is not None
            assert hit.epoch_ms == load_ms[pos]
            # no earlier load sample is inside the window
            assert all(abs(m - solar_ms[i]) >= HOUR_MS for m in load_ms[:pos])


def test_gap_in_load_leaves_solar_unmatched(t0_ms):
    load = _load([t0_ms, t0_ms + 5 * HOUR_MS])
    solar = _solar([t0_ms + 2 * HOUR_MS, t0_ms + 3 * HOUR_MS])
    assert align.match_indices(load, solar).tolist() == [-1, -1]


def test_empty_inputs_never_match(t0_ms):
    empty_load = NetLoadSeries.empty()
    solar = _solar([t0_ms])
    assert align.match_indices(empty_load, solar).tolist() == [-1]
    assert align.first_within_tolerance(solar[0], empty_load) is None
    assert align.match_indices(_load([t0_ms]), SolarPerUnitSeries.empty()).tolist() == []


def test_iter_aligned_skips_unmatched(scenario_load, t0):
    solar = SolarPerUnitSeries.from_arrays(
        [t0, t0 + pd.Timedelta(hours=30)], [0.5, 0.7], tz="America/New_York"
    )
    pairs = list(align.iter_aligned(scenario_load, solar))
    assert len(pairs) == 1
    assert pairs[0].load.value == -5.0
    assert pairs[0].solar.value == 0.5


def test_unknown_policy_raises(scenario_load, scenario_solar):
    with pytest.raises(AlignmentError):
        align.match_indices(scenario_load, scenario_solar, policy="closest")
