"""Load-aware cluster selection."""

from __future__ import annotations

import logging
import math
import random
from typing import Iterable

from .config import DEFAULT_LOAD_METRIC
from .models import ClusterRecord, ClusterState

LOG = logging.getLogger(__name__)


def pick_cluster(
    clusters: Iterable[ClusterRecord],
    *,
    metric: str = DEFAULT_LOAD_METRIC,
    rng: random.Random | None = None,
) -> ClusterRecord | None:
    """Pick one cluster with probability proportional to its available capacity.

    Clusters still being created are skipped. Each cluster with a positive
    ``metric`` draws the key ``-ln(u) / metric`` and the smallest key wins, so a
    single pass gives each of them a share proportional to its metric. When no
    cluster reports capacity the choice is uniform over the connectable ones.
    Returns None when nothing is connectable.
    """

    rng = rng or random.Random()
    connectable = [cluster for cluster in clusters if cluster.state is not ClusterState.CREATING]
    if not connectable:
        return None

    winner: ClusterRecord | None = None
    best_key = math.inf
    for cluster in connectable:
        weight = cluster.load(metric)
        if weight <= 0:
            continue
        key = -math.log(_open_unit(rng)) / weight
        if key < best_key:
            winner, best_key = cluster, key
    if winner is not None:
        return winner

    LOG.warning(
        "No cluster reports available capacity; choosing uniformly",
        extra={"metric": metric, "candidates": len(connectable)},
    )
    return rng.choice(connectable)


def _open_unit(rng: random.Random) -> float:
    """Uniform draw in (0, 1); ``random()`` can return exactly 0.0."""

    sample = rng.random()
    while sample == 0.0:
        sample = rng.random()
    return sample


__all__ = ["pick_cluster"]
