"""Tests for load-aware cluster selection."""

from __future__ import annotations

import random
from collections import Counter

from hivepool.models import ClusterRecord, ClusterState
from hivepool.selection import pick_cluster

METRIC = "yarn-memory-mb-available"


def _cluster(name: str, available: int | None = None, state: ClusterState = ClusterState.RUNNING) -> ClusterRecord:
    metrics = {} if available is None else {METRIC: available}
    return ClusterRecord(name=name, state=state, metrics=metrics)


class _ZeroThenHalf(random.Random):
    def __init__(self) -> None:
        super().__init__(0)
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        return 0.0 if self.draws == 1 else 0.5


def test_zero_capacity_cluster_is_never_picked() -> None:
    clusters = [_cluster("A", 0), _cluster("B", 100)]
    rng = random.Random(7)

    picks = {pick_cluster(clusters, rng=rng).name for _ in range(200)}

    assert picks == {"B"}


def test_missing_metrics_count_as_zero() -> None:
    clusters = [_cluster("A"), _cluster("B", 5)]
    rng = random.Random(3)

    assert {pick_cluster(clusters, rng=rng).name for _ in range(100)} == {"B"}


def test_all_zero_falls_back_to_uniform_choice() -> None:
    clusters = [_cluster("A", 0), _cluster("B", 0)]
    rng = random.Random(11)

    counts = Counter(pick_cluster(clusters, rng=rng).name for _ in range(400))

    assert set(counts) == {"A", "B"}
    assert 120 < counts["A"] < 280


def test_creating_clusters_are_skipped() -> None:
    clusters = [_cluster("new", 10_000, ClusterState.CREATING), _cluster("old", 1)]
    rng = random.Random(5)

    assert {pick_cluster(clusters, rng=rng).name for _ in range(100)} == {"old"}


def test_only_creating_clusters_yields_none() -> None:
    clusters = [_cluster("new", 100, ClusterState.CREATING)]

    assert pick_cluster(clusters) is None
    assert pick_cluster([]) is None


def test_selection_is_proportional_to_capacity() -> None:
    clusters = [_cluster("small", 100), _cluster("large", 300)]
    rng = random.Random(1234)

    counts = Counter(pick_cluster(clusters, rng=rng).name for _ in range(4000))

    share = counts["large"] / 4000
    assert 0.70 < share < 0.80


def test_zero_draw_is_redrawn() -> None:
    rng = _ZeroThenHalf()

    winner = pick_cluster([_cluster("only", 10)], rng=rng)

    assert winner is not None and winner.name == "only"
    assert rng.draws == 2


def test_custom_metric_name() -> None:
    clusters = [
        ClusterRecord(name="A", metrics={"yarn-vcores-available": 0, METRIC: 50}),
        ClusterRecord(name="B", metrics={"yarn-vcores-available": 8}),
    ]
    rng = random.Random(9)

    assert {pick_cluster(clusters, metric="yarn-vcores-available", rng=rng).name for _ in range(50)} == {"B"}
