"""
Clustering engine: seeding, the assign/update loop, and termination.

Owns the authoritative point list, the k clusters and the assignment
table for a single run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from .models import (
    Point,
    Cluster,
    AssignmentTable,
    UNASSIGNED,
    dimension_of,
)
from .algorithm import (
    PassStats,
    find_nearest_cluster,
    assign_points,
    update_centroids,
    total_inertia,
)


class PreconditionError(ValueError):
    """Raised when the engine is given inputs it cannot cluster."""


@dataclass
class ClusteringResult:
    """Final clusters of a run plus how the run ended."""

    clusters: list[Cluster]
    points: list[Point]
    assignments: AssignmentTable
    iterations: int
    converged: bool
    history: list[PassStats] = field(default_factory=list)

    @property
    def k(self) -> int:
        return len(self.clusters)

    def labels(self) -> dict[str, int]:
        """Point name -> cluster id, in input order."""
        return {p.name: self.assignments.get(p.name) for p in self.points}

    def inertia(self) -> float:
        """Total within-cluster squared distance."""
        return total_inertia(self.clusters)

    def cluster_sizes(self) -> list[int]:
        return [c.size for c in self.clusters]


class ClusteringEngine:
    """
    Batch Lloyd's k-means over an ordered sequence of points.

    Clusters 0..k-1 are seeded from the first k points in input order, so
    repeated runs over the same input give identical results.
    """

    def __init__(self, k: int, points: list[Point], verbose: bool = False):
        """
        Args:
            k: Number of clusters
            points: Points in input order (names assumed unique)
            verbose: Print per-pass progress
        """
        self._check_preconditions(k, points)

        self.k = k
        self.points = list(points)
        self.dimension = self.points[0].dimension
        self.verbose = verbose

        self.clusters: list[Cluster] = []
        self.assignments = AssignmentTable()
        self.iterations = 0
        self.history: list[PassStats] = []

    @staticmethod
    def _check_preconditions(k: int, points: list[Point]) -> None:
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            raise PreconditionError(f"k must be an integer, got {k!r}")
        if k <= 0:
            raise PreconditionError(f"k must be positive, got {k}")
        if not points:
            raise PreconditionError("No points to cluster")
        if k > len(points):
            raise PreconditionError(
                f"k={k} exceeds number of points ({len(points)})"
            )

        for p in points:
            if p.coordinates.ndim != 1:
                raise PreconditionError(f"Point {p.name!r} is not a flat vector")

        dim = dimension_of(points)
        if dim is None:
            raise PreconditionError("Points have inconsistent dimensionality")
        if dim == 0:
            raise PreconditionError("Points have zero dimensions")

        for p in points:
            if not np.all(np.isfinite(p.coordinates)):
                raise PreconditionError(f"Point {p.name!r} has non-finite coordinates")

    @property
    def initialized(self) -> bool:
        return len(self.clusters) == self.k

    def init_clusters(self) -> None:
        """Seed clusters 0..k-1 with the first k points' coordinates."""
        self.clusters = [
            Cluster(cluster_id=i, centroid=self.points[i].coordinates.copy())
            for i in range(self.k)
        ]
        self.assignments.clear()
        self.iterations = 0
        self.history = []

    def nearest_cluster(self, point: Point) -> int:
        """Id of the cluster nearest to a point (lowest id on ties)."""
        return find_nearest_cluster(point.coordinates, self.clusters)

    def cluster_of(self, point: Point) -> int:
        """Current cluster id of a point, or UNASSIGNED."""
        return self.assignments.get(point.name)

    def step(self) -> PassStats:
        """
        Run one full pass.

        All points are reassigned before any centroid is recomputed.
        """
        if not self.initialized:
            self.init_clusters()

        assigned, reassigned = assign_points(self.points, self.clusters, self.assignments)
        empty = update_centroids(self.clusters)

        self.iterations += 1
        stats = PassStats(
            iteration=self.iterations,
            assigned=assigned,
            reassigned=reassigned,
            empty_clusters=empty,
        )
        self.history.append(stats)

        if self.verbose:
            print(f"  Pass {stats.iteration}: assigned {assigned}, "
                  f"reassigned {reassigned}, empty clusters {empty}")

        return stats

    def run(
        self,
        max_iterations: int,
        on_pass: Optional[Callable[[PassStats], None]] = None,
    ) -> ClusteringResult:
        """
        Run passes until assignments stop changing or the cap is reached.

        Args:
            max_iterations: Maximum number of passes (0 runs none)
            on_pass: Called with the stats of each completed pass

        Returns:
            ClusteringResult with final clusters and termination info
        """
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
            raise PreconditionError(f"max_iterations must be an integer, got {max_iterations!r}")
        if max_iterations < 0:
            raise PreconditionError(f"max_iterations must be nonnegative, got {max_iterations}")

        if not self.initialized:
            self.init_clusters()

        if self.verbose:
            print(f"Clustering {len(self.points)} points into {self.k} clusters "
                  f"(max {max_iterations} passes)...")

        start = len(self.history)
        converged = False
        for _ in range(max_iterations):
            stats = self.step()
            if on_pass is not None:
                on_pass(stats)
            if not stats.changed:
                converged = True
                break

        if self.verbose:
            state = "Converged" if converged else "Stopped at iteration cap"
            print(f"{state} after {len(self.history) - start} passes")

        return self.result(converged, since=start)

    def result(self, converged: Optional[bool] = None, since: int = 0) -> ClusteringResult:
        """
        Snapshot the current clusters as a result.

        Clusters and assignments are copied, so later passes do not alter
        the returned result.

        Args:
            converged: Termination flag (default: last pass changed nothing)
            since: Index of the first pass to include in the history
        """
        history = list(self.history[since:])
        if converged is None:
            converged = bool(history) and not history[-1].changed
        return ClusteringResult(
            clusters=[c.copy() for c in self.clusters],
            points=list(self.points),
            assignments=self.assignments.copy(),
            iterations=len(history),
            converged=converged,
            history=history,
        )

    def verify_partition(self) -> None:
        """Raise RuntimeError if assignment table and memberships disagree."""
        seen: set[str] = set()
        for cluster in self.clusters:
            names = cluster.member_names()
            if set(names) != set(self.assignments.members_of(cluster.cluster_id)):
                raise RuntimeError(
                    f"Cluster {cluster.cluster_id} membership does not match assignments"
                )
            for name in names:
                if name in seen:
                    raise RuntimeError(f"Point {name!r} is in more than one cluster")
                seen.add(name)

        if len(seen) != self.assignments.assigned_count():
            raise RuntimeError(
                f"{self.assignments.assigned_count()} points assigned but "
                f"{len(seen)} are cluster members"
            )
        for name, cid in self.assignments.assignments.items():
            if cid == UNASSIGNED or not 0 <= cid < self.k:
                raise RuntimeError(f"Point {name!r} has invalid cluster id {cid}")

        # Every pass assigns every point
        if self.iterations > 0:
            for point in self.points:
                if self.assignments.get(point.name) == UNASSIGNED:
                    raise RuntimeError(f"Point {point.name!r} is in no cluster")
