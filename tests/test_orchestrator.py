from __future__ import annotations

import logging
from collections import Counter

import pytest

from spsbench import (
    BenchmarkMode,
    BenchmarkStateError,
    InvalidConfiguration,
    SharingPolicy,
    SPSBenchmark,
    Stage,
    UnsupportedMode,
    default_config,
    run_benchmark,
    select_engine,
)
from spsbench_sps import Groth15G1, Groth15G2

from conftest import TEST_ORDER

STAGES = ["setup", "keyGen", "sign", "verify"]


class CallCountingOperation:
    """Wraps a measured operation and counts every delegate/instance call."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.name = inner.name
        self.message_group = inner.message_group
        self.calls: Counter[str] = Counter()

    def construct(self, substrate, payload_size):
        self.calls["construct"] += 1
        return _CountingInstance(self.inner.construct(substrate, payload_size), self.calls)


class _CountingInstance:
    def __init__(self, inner, calls: Counter) -> None:
        self._inner = inner
        self._calls = calls

    def __getattr__(self, attr):
        target = getattr(self._inner, attr)

        def _wrapped(*args, **kwargs):
            self._calls[attr] += 1
            return target(*args, **kwargs)

        return _wrapped


@pytest.fixture
def scenario_config():
    return default_config(5, 20, 4, order=TEST_ORDER)


def test_scenario_time_mode(scenario_config) -> None:
    op = CallCountingOperation(Groth15G1())
    results = run_benchmark(scenario_config, op, BenchmarkMode.TIME)

    assert [r.stage for r in results] == STAGES
    for r in results:
        assert r.mode == "time"
        assert r.counts is None
        assert r.times is not None
        assert r.times.runs == 20
        assert 0.0 <= r.times.min_ms <= r.times.avg_ms <= r.times.max_ms
        assert r.times.sum_ms == pytest.approx(r.times.avg_ms * 20)
        assert not r.anomalous
    # blueprint + 5 pre-warm + 20 measured
    assert op.calls["construct"] == 26
    assert op.calls["generate_key_pair"] == 25
    assert op.calls["sign"] == 25
    assert op.calls["verify"] == 25
    assert op.calls["serialize_key_pair"] == 0


def test_scenario_counting_mode(scenario_config) -> None:
    results = run_benchmark(scenario_config, Groth15G1(), BenchmarkMode.COUNTING)

    assert [r.stage for r in results] == STAGES
    for r in results:
        assert r.mode == "counting"
        assert r.times is None
        table = r.counts
        assert table is not None
        assert table.bucket_total(r.stage) > 0
        for other in STAGES:
            if other != r.stage:
                assert table.bucket_total(other) == 0
        assert not r.anomalous


def test_counting_attributes_the_expected_structures(scenario_config) -> None:
    results = {r.stage: r.counts for r in run_benchmark(scenario_config, Groth15G1(), BenchmarkMode.COUNTING)}
    # setup: Y = G^y in G1 plus the precomputed e(Y, H)
    assert results["setup"].get("setup", "G1").exponentiations == 1
    assert results["setup"].pairings("setup") == 1
    # keyGen: V = H^v in G2 only
    assert results["keyGen"].get("keyGen", "G2").exponentiations == 1
    assert results["keyGen"].total("keyGen", "G1") == 0
    # sign: R in G2; S, Y^v and one T_i per message element in G1
    assert results["sign"].get("sign", "G2").exponentiations == 1
    assert results["sign"].get("sign", "G1").exponentiations == 3 + 4
    # verify: 2 + 1 + 2 * n pairings
    assert results["verify"].pairings("verify") == 3 + 2 * 4
    assert results["verify"].total("verify", "GT") > 0


def test_counting_is_deterministic_across_runs(scenario_config) -> None:
    first = run_benchmark(scenario_config, Groth15G2(), BenchmarkMode.COUNTING)
    second = run_benchmark(scenario_config, Groth15G2(), BenchmarkMode.COUNTING)
    for a, b in zip(first, second):
        assert a.counts.pairings(a.stage) == b.counts.pairings(b.stage)
        for structure in ("G1", "G2", "GT"):
            assert a.counts.get(a.stage, structure).exponentiations == b.counts.get(b.stage, structure).exponentiations


def test_scenario_invalid_config_fails_before_any_stage() -> None:
    op = CallCountingOperation(Groth15G1())
    with pytest.raises(InvalidConfiguration):
        run_benchmark(default_config(10, 5, 4, order=TEST_ORDER), op, BenchmarkMode.TIME)
    assert sum(op.calls.values()) == 0


@pytest.mark.parametrize("mode", [BenchmarkMode.TIME, BenchmarkMode.COUNTING])
def test_tampered_message_is_reported_not_raised(mode, small_config, caplog) -> None:
    bench = SPSBenchmark(small_config, Groth15G1(), mode)
    bench.run_stage(Stage.SETUP)
    bench.run_stage(Stage.KEYGEN)
    bench.run_stage(Stage.SIGN)

    group = small_config.substrate_for(mode).g1
    bench.messages[0] = tuple(group.random_element() for _ in range(small_config.payload_size))

    with caplog.at_level(logging.WARNING, logger="spsbench.orchestrator"):
        result = bench.run_stage(Stage.VERIFY)

    assert result.stage == "verify"
    assert result.verify_failures == 1
    assert result.anomalous
    assert bench.verify_outcomes[0] is False
    assert "returned false" in caplog.text


def test_stages_must_run_in_order(small_config) -> None:
    bench = SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.TIME)
    with pytest.raises(BenchmarkStateError):
        bench.run_stage(Stage.SIGN)
    bench.run_stage("setup")
    with pytest.raises(BenchmarkStateError):
        bench.run_stage(Stage.SETUP)
    bench.run()
    assert bench.finished
    with pytest.raises(BenchmarkStateError):
        bench.run_stage(Stage.VERIFY)


def test_sharing_policy_per_mode(small_config) -> None:
    timed = SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.TIME)
    counted = SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.COUNTING)
    assert timed.policy is SharingPolicy.FRESH_PER_ITERATION
    assert counted.policy is SharingPolicy.SINGLE_SHARED

    timed.run()
    counted.run()
    assert len(timed.key_pairs.values()) == small_config.run_iterations
    assert len({id(kp) for kp in timed.key_pairs.values()}) == small_config.run_iterations
    assert len(counted.key_pairs.values()) == 1
    assert counted.key_pairs[3] is counted.key_pairs[0]


def test_counting_verify_uses_restored_objects(small_config) -> None:
    op = CallCountingOperation(Groth15G1())
    bench = SPSBenchmark(small_config, op, BenchmarkMode.COUNTING)
    bench.run_stage(Stage.SETUP)
    bench.run_stage(Stage.KEYGEN)
    bench.run_stage(Stage.SIGN)
    signed = bench.signatures[0]
    result = bench.run_stage(Stage.VERIFY)

    assert op.calls["serialize_key_pair"] == 1
    assert op.calls["restore_key_pair"] == 1
    assert op.calls["serialize_signature"] == 1
    assert op.calls["restore_signature"] == 1
    assert bench.signatures[0] is not signed
    assert bench.signatures[0] == signed
    assert not result.anomalous


def test_explicit_messages_must_cover_every_iteration(small_config) -> None:
    with pytest.raises(InvalidConfiguration):
        SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.TIME, messages=[])


def test_explicit_messages_are_used(small_config) -> None:
    group = small_config.timing_substrate.g1
    messages = [tuple(group.random_element() for _ in range(3)) for _ in range(4)]
    bench = SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.TIME, messages=messages)
    bench.run()
    assert bench.messages == messages
    assert all(bench.verify_outcomes.values())


def test_unsupported_mode(small_config) -> None:
    with pytest.raises(UnsupportedMode):
        SPSBenchmark(small_config, Groth15G1(), "time")  # type: ignore[arg-type]
    with pytest.raises(UnsupportedMode):
        select_engine("counting", small_config)  # type: ignore[arg-type]


def test_summary_metadata(small_config) -> None:
    bench = SPSBenchmark(small_config, Groth15G1(), BenchmarkMode.COUNTING)
    bench.run()
    summary = bench.summary()
    assert summary.scheme == "groth15-g1"
    assert summary.mode == "counting"
    assert summary.meta["instance_class"] == "Groth15Instance"
    assert summary.meta["sharing_policy"] == "single-shared"
    assert summary.result("sign").stage == "sign"
