import asyncio

import numpy as np
import pytest

from envpinn.services import pinn_algorithms
from envpinn.services.pinn_algorithms import (
    PINNResult,
    combine_results,
    generate_temporal_data,
    merge_temporal_data,
    run_climode,
    run_for_focus,
    run_land_atmosphere_pinn,
    run_pcnn_tsa,
    run_pinn_ffht,
)
from envpinn.services.video_processor import VideoFeatures


@pytest.fixture()
def features(rng) -> VideoFeatures:
    return VideoFeatures(frames=rng.random((3, 6, 8)), metadata={})


@pytest.mark.parametrize(
    "runner, algorithm, category, days",
    [
        (run_climode, "ClimODE", "co2", 7),
        (run_pinn_ffht, "PINN-FFHT", "heat", 7),
        (run_pcnn_tsa, "PCNN-TSA", "ocean", 8),
        (run_land_atmosphere_pinn, "Land-Atmosphere PINN", "deforest", 7),
    ],
)
def test_runner_output(runner, algorithm, category, days, features, rng) -> None:
    result = runner(features, rng)

    assert result.algorithm == algorithm
    entry = result.category(category)
    assert 0 <= entry["score"] <= 100
    assert 0 < entry["confidence"] < 1
    assert 0 <= result.scores["overall"] <= 100
    assert [d["day"] for d in result.temporal_data] == list(range(1, days + 1))
    assert category in result.uncertainty_bounds
    assert result.physics_constraints


def test_climode_overall_is_mean_of_co2_and_heat(features, rng) -> None:
    result = run_climode(features, rng)
    co2 = result.scores["co2"]["score"]
    heat = result.scores["heat"]["score"]
    assert result.scores["overall"] == pytest.approx((co2 + heat) / 2)


def test_single_category_runners_leave_others_out(features, rng) -> None:
    result = run_pcnn_tsa(features, rng)
    assert result.category("co2") is None
    assert result.category("heat") is None
    assert result.scores["overall"] == result.scores["ocean"]["score"]


def test_scores_are_clamped() -> None:
    assert pinn_algorithms._score(150.04) == 100.0
    assert pinn_algorithms._score(-3.2) == 0.0
    assert pinn_algorithms._score(42.26) == 42.3


def test_generate_temporal_data(rng) -> None:
    data = generate_temporal_data(3, ["co2", "heat"], rng)
    assert len(data) == 3
    for entry in data:
        assert set(entry) == {"day", "co2", "heat"}
        # 85..95 base, +/-3 trend, +/-1 noise
        assert 81 <= entry["co2"] <= 99


def _result(name, category, score, days):
    return PINNResult(
        algorithm=name,
        scores={category: {"score": score, "confidence": 0.9}, "overall": score},
        temporal_data=[{"day": d, category: float(d)} for d in range(1, days + 1)],
        uncertainty_bounds={category: {"lower": score - 1, "upper": score + 1}},
    )


def test_combine_results_averages_member_overalls() -> None:
    combined = combine_results(
        _result("ClimODE", "co2", 80.0, 7),
        _result("PINN-FFHT", "heat", 90.0, 7),
        _result("PCNN-TSA", "ocean", 94.0, 8),
        _result("Land-Atmosphere PINN", "deforest", 76.0, 7),
    )

    assert combined.algorithm == "Multi-Algorithm Ensemble"
    assert combined.scores["overall"] == pytest.approx(85.0)
    assert combined.scores["ocean"]["score"] == 94.0
    assert set(combined.uncertainty_bounds) == {"co2", "heat", "ocean", "deforest"}
    assert set(combined.physics_constraints) == {"climode", "ffht", "pcnn", "land"}


def test_merge_temporal_data_aligns_by_day() -> None:
    merged = merge_temporal_data([
        (_result("a", "co2", 1.0, 7), "co2"),
        (_result("b", "ocean", 1.0, 8), "ocean"),
    ])

    assert [row["day"] for row in merged] == list(range(1, 9))
    assert merged[0] == {"day": 1, "co2": 1.0, "ocean": 1.0}
    assert merged[7] == {"day": 8, "ocean": 8.0}


@pytest.mark.parametrize(
    "focus, algorithm",
    [
        ("carbon-dioxide", "ClimODE"),
        ("heat-flux", "PINN-FFHT"),
        ("ocean-currents", "PCNN-TSA"),
        ("deforestation", "Land-Atmosphere PINN"),
        ("volcanic-ash", "ClimODE"),
    ],
)
def test_run_for_focus_dispatch(focus, algorithm, features, rng) -> None:
    result = asyncio.run(run_for_focus(focus, features, rng))
    assert result.algorithm == algorithm


def test_run_for_focus_multi_parameter(features, rng) -> None:
    result = asyncio.run(run_for_focus("multi-parameter", features, rng))

    assert result.algorithm == "Multi-Algorithm Ensemble"
    for category in ("co2", "heat", "ocean", "deforest"):
        assert 0 <= result.scores[category]["score"] <= 100
    assert len(result.temporal_data) == 8
    assert set(result.temporal_data[0]) == {"day", "co2", "heat", "ocean", "deforest"}
    assert set(result.temporal_data[7]) == {"day", "ocean"}


def test_multi_parameter_is_reproducible_with_seed(features) -> None:
    a = asyncio.run(run_for_focus("multi-parameter", features, np.random.default_rng(3)))
    b = asyncio.run(run_for_focus("multi-parameter", features, np.random.default_rng(3)))
    assert a.scores == b.scores
    assert a.temporal_data == b.temporal_data


def test_multi_parameter_overall_is_mean_of_member_runs(features, rng, monkeypatch) -> None:
    member_results = {}
    for name in ("run_climode", "run_pinn_ffht", "run_pcnn_tsa", "run_land_atmosphere_pinn"):
        def recording(feats, child_rng, _runner=getattr(pinn_algorithms, name), _name=name):
            result = _runner(feats, child_rng)
            member_results[_name] = result
            return result

        monkeypatch.setattr(pinn_algorithms, name, recording)

    result = asyncio.run(run_for_focus("multi-parameter", features, rng))

    assert len(member_results) == 4
    member_overalls = [r.scores["overall"] for r in member_results.values()]
    assert result.scores["overall"] == pytest.approx(sum(member_overalls) / 4)
    assert result.scores["co2"] == member_results["run_climode"].scores["co2"]
    assert result.scores["ocean"] == member_results["run_pcnn_tsa"].scores["ocean"]
