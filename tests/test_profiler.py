import pytest

from particle_sim.profiler import ProfileStats, Profiler


def test_sections_are_recorded_and_summarized():
    prof = Profiler()
    for _ in range(3):
        with prof.section("work"):
            sum(range(1000))
    summary = prof.stats.summary()
    assert summary["work"]["n"] == 3
    assert summary["work"]["max_ms"] >= summary["work"]["mean_ms"] >= 0.0
    assert prof.stats.total("work") * 1e3 == pytest.approx(summary["work"]["total_ms"])
    assert prof.stats.total("missing") == 0.0


def test_section_records_even_when_body_raises():
    prof = Profiler()
    with pytest.raises(RuntimeError):
        with prof.section("boom"):
            raise RuntimeError("fail")
    assert prof.stats.summary()["boom"]["n"] == 1
    prof.reset()
    assert prof.stats.summary() == {}


def test_summary_statistics_from_known_samples():
    stats = ProfileStats()
    stats.add("solve", 0.001)
    stats.add("solve", 0.003)
    stats.add("wrap", 0.0005)
    summary = stats.summary()
    assert summary["solve"] == pytest.approx({"n": 2, "mean_ms": 2.0, "max_ms": 3.0, "total_ms": 4.0})
    assert summary["wrap"]["n"] == 1
    assert summary["wrap"]["total_ms"] == pytest.approx(0.5)
    assert stats.total("solve") == pytest.approx(0.004)
